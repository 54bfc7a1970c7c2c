"""Process-wide defaults shared by every builder created from one context."""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .utils import DEFAULT_DATE_FORMAT

DEFAULT_URL_ENV_VAR = "HTTPCHAIN_DEFAULT_URL"


class HttpChainConfig(BaseModel):
    """Defaults and feature flags.

    ``curl_info_enabled`` adds the transport diagnostic bag to the envelope
    metadata.
    """

    model_config = ConfigDict(extra="allow", frozen=True, arbitrary_types_allowed=True)

    response_only: bool = False
    trace_enabled: bool = False
    exceptions_enabled: bool = False
    metadata_enabled: bool = False
    request_info_enabled: bool = False
    curl_info_enabled: bool = False
    default_url: str | None = None
    date_format: str = DEFAULT_DATE_FORMAT
    binary_content_types: set[str] = Field(default_factory=set)
    default_headers: dict[str, Any] = Field(default_factory=dict)
    default_options: dict[str, Any] = Field(default_factory=dict)
    default_callbacks: list[Any] = Field(default_factory=list)

    @classmethod
    def from_env(cls, *, default_url_env_var: str = DEFAULT_URL_ENV_VAR) -> "HttpChainConfig":
        default_url = os.getenv(default_url_env_var)
        return cls(default_url=default_url) if default_url else cls()


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigStore:
    """Holds the current :class:`HttpChainConfig`; updates replace it with a merged copy."""

    def __init__(self, config: HttpChainConfig | Mapping[str, Any] | None = None) -> None:
        if isinstance(config, Mapping):
            config = HttpChainConfig.model_validate(_deep_merge(dict(HttpChainConfig.from_env()), config))
        self._initial = config or HttpChainConfig.from_env()
        self._config = self._initial

    @property
    def config(self) -> HttpChainConfig:
        return self._config

    def set_config(self, partial: Mapping[str, Any]) -> None:
        merged = _deep_merge(dict(self._config), partial)
        self._config = HttpChainConfig.model_validate(merged)

    def get_config(self, key: str | None = None) -> Any:
        snapshot = self._config.model_dump()
        if key is None:
            return snapshot
        return snapshot.get(key)

    def reset(self) -> None:
        self._config = self._initial
