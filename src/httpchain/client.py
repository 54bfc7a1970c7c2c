"""Fluent request builder with a callback pipeline over the response body."""

from __future__ import annotations

import time
import zlib
from typing import Any, Iterable, Mapping
from urllib.parse import urlencode

import structlog

from .callbacks import CallbackFailure, CallbackPipeline, Validator
from .config import HttpChainConfig
from .context import HttpChainContext, default_context
from .exceptions import HttpChainCallbackError
from .filters import filter_output
from .models import Envelope, Metadata
from .request_options import HttpAuth, RequestOptions
from .transport import TransportResult
from .utils import format_timestamp, readable_bytes

logger = structlog.get_logger(__name__)


def _header_name(line: str) -> str:
    return line.partition(":")[0].strip().lower()


def _header_line(key: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        value = " ".join(str(v) for v in value)
    return f"{key}: {value}"


def _coerce_post_fields(fields: Any) -> str | bytes | None:
    if fields is None:
        return None
    if isinstance(fields, Mapping):
        return urlencode(fields, doseq=True)
    if isinstance(fields, (bytes, bytearray)):
        return bytes(fields)
    return str(fields)


class HttpChain:
    """Builds one HTTP request, executes it and pipes the body through callbacks.

    Every method except the terminal ones (``execute``, ``get``, ``delete``,
    ``patch``, ``put``) returns the builder so calls can be chained::

        envelope = (
            HttpChain()
            .method("get")
            .url("https://example.test/items")
            .json_decode()
            .execute()
        )
    """

    def __init__(self, *, context: HttpChainContext | None = None) -> None:
        self._context = context or default_context()
        config = self._context.config.config
        self._options = RequestOptions()
        self._pipeline = CallbackPipeline(self._context.resolver)
        self._path: str | None = None
        self._disable_default_url: bool | None = None
        self._response_only: bool | None = None
        self._request_info: bool | None = None
        self._transport_info: bool | None = None
        self._exceptions_enabled = config.exceptions_enabled
        self.diagnostics: list[tuple[str, str]] = []

        if config.default_headers:
            self.header(config.default_headers)
        if config.default_options:
            self.set_options(config.default_options)
        for stage in config.default_callbacks:
            if isinstance(stage, (list, tuple)):
                self.callback(*stage)
            else:
                self.callback(stage)

    @property
    def context(self) -> HttpChainContext:
        return self._context

    @property
    def pipeline(self) -> CallbackPipeline:
        return self._pipeline

    def options(self) -> dict[str, Any]:
        return self._options.as_dict()

    # options

    def set_option(self, key: str, value: Any) -> "HttpChain":
        if key == "url":
            self._path = None
        self._options.set(key, value)
        return self

    def set_options(self, options: Mapping[str, Any]) -> "HttpChain":
        for key, value in options.items():
            self.set_option(str(key), value)
        return self

    def method(self, name: str) -> "HttpChain":
        self._options.method = name.upper()
        return self

    def _resolve_url(self, path: str) -> str:
        prefix = None if self._disable_default_url else self._context.config.config.default_url
        return f"{prefix or ''}{path}"

    def url(self, path: str) -> "HttpChain":
        self._path = path
        self._options.url = self._resolve_url(path)
        return self

    def disable_default_url(self, flag: bool = True) -> "HttpChain":
        self._disable_default_url = flag
        return self

    def disable_default_host(self, flag: bool = True) -> "HttpChain":
        return self.disable_default_url(flag)

    def header(self, headers: Mapping[str, Any] | Iterable[str], overwrite: bool = False) -> "HttpChain":
        """Merge headers into the request; ``overwrite`` drops every existing header first.

        Mapping entries become ``"Key: value"`` lines, list values are joined
        with a space. A header that is already set is replaced in place of
        being sent twice.
        """
        lines = [] if overwrite else list(self._options.headers)
        if isinstance(headers, Mapping):
            incoming = [_header_line(str(key), value) for key, value in headers.items()]
        else:
            incoming = [str(line) for line in headers]
        for line in incoming:
            name = _header_name(line)
            lines = [existing for existing in lines if _header_name(existing) != name]
            lines.append(line)
        self._options.headers = lines
        return self

    # auth

    def http_auth(self, scheme: HttpAuth | str) -> "HttpChain":
        self._options.http_auth = HttpAuth.coerce(scheme)
        return self

    def user_credentials(self, user: str, password: str | None = None) -> "HttpChain":
        self._options.user_pwd = f"{user}:{password}" if password else user
        return self

    def auth_any(self, user: str, password: str | None = None) -> "HttpChain":
        return self.http_auth(HttpAuth.ANY).user_credentials(user, password)

    def auth_basic(self, user: str, password: str | None = None) -> "HttpChain":
        return self.http_auth(HttpAuth.BASIC).user_credentials(user, password)

    def auth_digest(self, user: str, password: str | None = None) -> "HttpChain":
        return self.http_auth(HttpAuth.DIGEST).user_credentials(user, password)

    def auth_bearer(self, token: str, user: str | None = None) -> "HttpChain":
        self.http_auth(HttpAuth.BEARER)
        self._options.bearer_token = token
        if user:
            self._options.username = user
        return self

    # body

    def post(self, fields: Any = None) -> "HttpChain":
        self.method("post")
        self.post_fields(fields)
        self._options.post = True
        return self

    def post_fields(self, fields: Any) -> "HttpChain":
        self._options.post_fields = _coerce_post_fields(fields)
        return self

    # per-instance flags

    def response_only(self, flag: bool = True) -> "HttpChain":
        self._response_only = flag
        return self

    def request_info(self, flag: bool = True) -> "HttpChain":
        self._request_info = flag
        return self

    def include_transport_info(self, flag: bool = True) -> "HttpChain":
        self._transport_info = flag
        return self

    def enable_exceptions(self, flag: bool = True) -> "HttpChain":
        self._exceptions_enabled = flag
        return self

    # callbacks

    def _callback_error(self, failure: CallbackFailure, raise_error: bool) -> None:
        header = f"x-callback-error-{zlib.crc32(str(time.perf_counter_ns()).encode())}"
        self.diagnostics.append((header, failure.message))
        logger.warning(
            "callback_error",
            message=failure.message,
            operation=failure.operation,
            signal=header,
        )
        if raise_error:
            raise HttpChainCallbackError(f"{failure.message} ({type(self).__name__}.{failure.operation})")

    def callback(self, target: Any = None, *params: Any) -> "HttpChain":
        failure = self._pipeline.register(target, *params)
        if failure is not None:
            self._callback_error(failure, self._exceptions_enabled)
        return self

    def callback_if(self, validators: Iterable[Validator] | Validator, target: Any = None, *params: Any) -> "HttpChain":
        failure = self._pipeline.register_if(validators, target, *params)
        if failure is not None:
            self._callback_error(failure, self._exceptions_enabled)
        return self

    def json_decode(self, *params: Any) -> "HttpChain":
        return self.callback_if(["is_json_string"], "json_decode", *params)

    def json_encode(self, *params: Any) -> "HttpChain":
        return self.callback_if(["is_json_object"], "json_encode", *params)

    def html_escape(self, *params: Any) -> "HttpChain":
        return self.callback_if(["is_string"], "html_escape", *params)

    def html_special_chars(self, *params: Any) -> "HttpChain":
        return self.html_escape(*params)

    # execution

    def _metadata(self, result: TransportResult, config: HttpChainConfig) -> Metadata | None:
        fields: dict[str, Any] = {}
        if config.metadata_enabled:
            fields["scheme"] = result.scheme
            fields["size"] = readable_bytes(result.size_download)
            fields["timestamp"] = format_timestamp(self._context.clock(), config.date_format)
        request_info = self._request_info if self._request_info is not None else config.request_info_enabled
        if request_info:
            fields["request_info"] = dict(self._context.request_info_provider())
        transport_info = self._transport_info if self._transport_info is not None else config.curl_info_enabled
        if transport_info:
            fields["transport_info"] = dict(result.info)
        return Metadata(**fields) if fields else None

    def execute(self, url: str | None = None, extra_options: Mapping[str, Any] | None = None) -> Any:
        """Perform the request and return the envelope, or only the payload in response-only mode."""
        if extra_options:
            self.set_options(extra_options)
        if url:
            self.url(url)
        elif self._path is not None:
            self._options.url = self._resolve_url(self._path)

        config = self._context.config.config
        raise_errors = self._exceptions_enabled
        options = self._options

        result = self._context.transport.perform(options)
        metadata = self._metadata(result, config)
        if config.trace_enabled:
            self._context.recorder.record_call(options.method, result.http_code, options.url, date_format=config.date_format)
        else:
            self._context.recorder.count_call()

        failed = bool(result.error) or result.http_code != 200
        payload = filter_output(result, config.binary_content_types)
        if self._pipeline:
            outcome = self._pipeline.run(payload, stop_on_failure=raise_errors)
            for failure in outcome.failures:
                self._callback_error(failure, raise_errors)
            payload = outcome.payload

        logger.info(
            "http_request_complete",
            method=options.method,
            url=options.url,
            http_code=result.http_code,
            status="error" if failed else "ok",
            stages=len(self._pipeline),
        )

        response_only = self._response_only if self._response_only is not None else config.response_only
        if response_only:
            return payload
        return Envelope(
            url=options.url,
            http_code=result.http_code,
            status="error" if failed else "ok",
            method=options.method,
            content_type=result.content_type,
            metadata=metadata,
            error=f"{result.http_code} {result.error}".strip() if failed else None,
            response=payload,
        )

    def get(self, url: str | None = None, extra_options: Mapping[str, Any] | None = None) -> Any:
        return self.method("get").execute(url, extra_options)

    def delete(self, url: str | None = None, extra_options: Mapping[str, Any] | None = None) -> Any:
        return self.method("delete").execute(url, extra_options)

    def patch(self, url: str | None = None, extra_options: Mapping[str, Any] | None = None) -> Any:
        return self.method("patch").execute(url, extra_options)

    def put(self, url: str | None = None, extra_options: Mapping[str, Any] | None = None) -> Any:
        return self.method("put").execute(url, extra_options)
