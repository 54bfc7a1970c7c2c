"""Shared state for builders: config store, trace recorder, target registries, transport.

Most code uses the process-wide default context through the module-level
helpers below. Tests and multi-tenant hosts create their own
:class:`HttpChainContext` and pass it to :class:`httpchain.HttpChain`.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping

from .callbacks import TargetResolver
from .config import ConfigStore, HttpChainConfig
from .security import default_request_info
from .trace import TraceEntry, TraceRecorder
from .transport import HttpxTransport, Transport
from .utils import BUILTIN_FUNCTIONS


class HttpChainContext:
    def __init__(
        self,
        *,
        config: HttpChainConfig | Mapping[str, Any] | None = None,
        transport: Transport | None = None,
        functions: Mapping[str, Callable[..., Any]] | None = None,
        classes: Mapping[str, type] | None = None,
        request_info_provider: Callable[[], Mapping[str, Any]] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = ConfigStore(config)
        self.recorder = TraceRecorder(clock=clock)
        self.transport: Transport = transport or HttpxTransport()
        self.resolver = TargetResolver({**BUILTIN_FUNCTIONS, **dict(functions or {})}, classes)
        self.request_info_provider = request_info_provider or default_request_info
        self.clock = clock

    def register_function(self, name: str, function: Callable[..., Any]) -> None:
        self.resolver.functions[name] = function

    def register_class(self, cls: type, name: str | None = None) -> None:
        self.resolver.classes[name or cls.__name__] = cls

    def set_config(self, partial: Mapping[str, Any]) -> None:
        self.config.set_config(partial)

    def get_config(self, key: str | None = None) -> Any:
        return self.config.get_config(key)

    def get_call_count(self) -> int:
        return self.recorder.get_call_count()

    def get_trace(self) -> dict[str, str]:
        return self.recorder.get_trace()

    def trace_entries(self) -> list[TraceEntry]:
        return self.recorder.entries()


_default_context: HttpChainContext | None = None


def default_context() -> HttpChainContext:
    global _default_context
    if _default_context is None:
        _default_context = HttpChainContext()
    return _default_context


def set_default_context(context: HttpChainContext | None) -> None:
    """Replace the process-wide context; ``None`` recreates it lazily."""
    global _default_context
    _default_context = context


def set_config(partial: Mapping[str, Any]) -> None:
    default_context().set_config(partial)


def get_config(key: str | None = None) -> Any:
    return default_context().get_config(key)


def get_call_count() -> int:
    return default_context().get_call_count()


def get_trace() -> dict[str, str]:
    return default_context().get_trace()
