"""Per-builder request options."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Mapping

from .exceptions import HttpChainConfigError

USER_AGENT = "httpchain/0.1.0"


class HttpAuth(str, Enum):
    ANY = "any"
    BASIC = "basic"
    DIGEST = "digest"
    BEARER = "bearer"

    @classmethod
    def coerce(cls, value: "HttpAuth | str") -> "HttpAuth":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise HttpChainConfigError(f"Unsupported auth scheme: {value}", cause=exc) from exc


@dataclass
class RequestOptions:
    method: str = "GET"
    url: str | None = None
    headers: list[str] = field(default_factory=list)
    http_auth: HttpAuth | None = None
    user_pwd: str | None = None
    bearer_token: str | None = None
    username: str | None = None
    post: bool = False
    post_fields: str | bytes | None = None
    verify_host: int = 2
    verify_peer: bool = True
    follow_redirects: bool = True
    max_redirects: int = 10
    connect_timeout: float = 90
    timeout: float = 90
    encoding: str = "gzip"
    user_agent: str = USER_AGENT
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def option_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls) if f.name != "extra")

    def set(self, key: str, value: Any) -> None:
        """Set one option; unknown keys are kept aside for the transport to report."""
        if key not in self.option_names():
            self.extra[key] = value
            return
        if key == "http_auth" and value is not None:
            value = HttpAuth.coerce(value)
        elif key == "headers":
            value = list(value or [])
        setattr(self, key, value)

    def update(self, options: Mapping[str, Any]) -> None:
        for key, value in options.items():
            self.set(str(key), value)

    def header_pairs(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for line in self.headers:
            name, sep, value = line.partition(":")
            if not sep:
                continue
            pairs.append((name.strip(), value.strip()))
        return pairs

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
