"""httpchain: one HTTP call, piped through a chain of callbacks."""

from .callbacks import CallbackPipeline, CallbackStage, TargetResolver
from .client import HttpChain
from .config import ConfigStore, HttpChainConfig
from .context import (
    HttpChainContext,
    default_context,
    get_call_count,
    get_config,
    get_trace,
    set_config,
    set_default_context,
)
from .exceptions import HttpChainCallbackError, HttpChainConfigError, HttpChainError
from .filters import filter_output
from .models import Envelope, Metadata
from .request_options import HttpAuth, RequestOptions
from .trace import TraceEntry, TraceRecorder
from .transport import HttpxTransport, Transport, TransportResult
from .utils import is_json_object, is_json_string, readable_bytes

__all__ = [
    "CallbackPipeline",
    "CallbackStage",
    "ConfigStore",
    "Envelope",
    "HttpAuth",
    "HttpChain",
    "HttpChainCallbackError",
    "HttpChainConfig",
    "HttpChainConfigError",
    "HttpChainContext",
    "HttpChainError",
    "HttpxTransport",
    "Metadata",
    "RequestOptions",
    "TargetResolver",
    "TraceEntry",
    "TraceRecorder",
    "Transport",
    "TransportResult",
    "default_context",
    "filter_output",
    "get_call_count",
    "get_config",
    "get_trace",
    "is_json_object",
    "is_json_string",
    "readable_bytes",
    "set_config",
    "set_default_context",
]
