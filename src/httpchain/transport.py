"""Network transport used by :class:`httpchain.HttpChain`."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import httpx
import structlog

from .request_options import HttpAuth, RequestOptions
from .security import sanitize_header_lines, sanitize_headers
from .utils import timestamp_diff

logger = structlog.get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class TransportResult:
    content: bytes | None
    text: str | None
    content_type: str | None
    http_code: int
    error: str = ""
    scheme: str | None = None
    size_download: int = 0
    info: Mapping[str, Any] = field(default_factory=dict)


class Transport(Protocol):
    def perform(self, options: RequestOptions) -> TransportResult:
        ...


def _has_header(pairs: list[tuple[str, str]], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key, _ in pairs)


def _split_credentials(user_pwd: str) -> tuple[str, str]:
    user, _, password = user_pwd.partition(":")
    return user, password


class HttpxTransport:
    """Performs one request per call on a fresh ``httpx.Client``."""

    def __init__(self, *, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport

    def _headers(self, options: RequestOptions) -> list[tuple[str, str]]:
        pairs = options.header_pairs()
        if options.user_agent and not _has_header(pairs, "User-Agent"):
            pairs.append(("User-Agent", options.user_agent))
        if options.encoding and not _has_header(pairs, "Accept-Encoding"):
            pairs.append(("Accept-Encoding", options.encoding))
        if options.post_fields is not None and not _has_header(pairs, "Content-Type"):
            pairs.append(("Content-Type", FORM_CONTENT_TYPE))
        if options.http_auth is HttpAuth.BEARER and options.bearer_token:
            pairs.append(("Authorization", f"Bearer {options.bearer_token}"))
        return pairs

    @staticmethod
    def _auth(options: RequestOptions) -> httpx.Auth | None:
        if options.http_auth is HttpAuth.BEARER or not options.user_pwd:
            return None
        user, password = _split_credentials(options.user_pwd)
        if options.http_auth is HttpAuth.DIGEST:
            return httpx.DigestAuth(user, password)
        return httpx.BasicAuth(user, password)

    @staticmethod
    def _timeout(options: RequestOptions) -> httpx.Timeout:
        return httpx.Timeout(options.timeout or None, connect=options.connect_timeout or None)

    def _client_kwargs(self, options: RequestOptions) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "verify": bool(options.verify_peer and options.verify_host),
            "follow_redirects": options.follow_redirects,
            "max_redirects": options.max_redirects,
            "timeout": self._timeout(options),
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def perform(self, options: RequestOptions) -> TransportResult:
        if not options.url:
            return TransportResult(content=None, text=None, content_type=None, http_code=0, error="No URL set")
        for key in options.extra:
            logger.warning("unknown_request_option", option=key)

        headers = self._headers(options)
        content = options.post_fields
        if isinstance(content, str):
            content = content.encode()
        started = time.time()
        logger.debug(
            "http_request_start",
            method=options.method,
            url=options.url,
            headers=sanitize_header_lines(f"{k}: {v}" for k, v in headers),
        )
        try:
            with httpx.Client(**self._client_kwargs(options)) as client:
                response = client.request(
                    options.method,
                    options.url,
                    headers=headers,
                    content=content,
                    auth=self._auth(options),
                )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            error = str(exc) or type(exc).__name__
            logger.warning("http_transport_error", method=options.method, url=options.url, error=error)
            return TransportResult(
                content=None,
                text=None,
                content_type=None,
                http_code=0,
                error=error,
                info={"url": options.url, "total_time": timestamp_diff(started, time.time())},
            )

        body = response.content
        info = {
            "url": str(response.url),
            "http_code": response.status_code,
            "http_version": response.http_version,
            "content_type": response.headers.get("content-type"),
            "redirect_count": len(response.history),
            "size_download": len(body),
            "total_time": timestamp_diff(started, time.time()),
            "request_header": sanitize_headers(dict(response.request.headers)),
            "response_header": sanitize_headers(dict(response.headers)),
        }
        return TransportResult(
            content=body,
            text=response.text,
            content_type=response.headers.get("content-type"),
            http_code=response.status_code,
            scheme=response.url.scheme.upper(),
            size_download=len(body),
            info=info,
        )
