"""Result models returned by :meth:`httpchain.HttpChain.execute`."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class HttpChainModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, arbitrary_types_allowed=True)


class Metadata(HttpChainModel):
    scheme: str | None = None
    size: str | None = None
    timestamp: str | None = None
    request_info: dict[str, Any] | None = None
    transport_info: dict[str, Any] | None = None


class Envelope(HttpChainModel):
    url: str | None = None
    http_code: int = 0
    status: Literal["ok", "error"] = "ok"
    method: str = "GET"
    content_type: str | None = None
    metadata: Metadata | None = None
    error: str | None = None
    response: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"
