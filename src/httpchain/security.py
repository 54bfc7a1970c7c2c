"""Redaction helpers for logging and request info."""

from __future__ import annotations

import os
from typing import Iterable, Mapping


SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
}

SENSITIVE_ENV_MARKERS = ("TOKEN", "SECRET", "PASSWORD", "PASSWD", "API_KEY", "CREDENTIAL")


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging/telemetry."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def sanitize_header_lines(lines: Iterable[str]) -> list[str]:
    """Same as :func:`sanitize_headers` for ``"Key: value"`` lines."""
    clean: list[str] = []
    for line in lines:
        name, sep, _ = line.partition(":")
        if sep and name.strip().lower() in SENSITIVE_HEADERS:
            clean.append(f"{name.strip()}: [REDACTED]")
        else:
            clean.append(line)
    return clean


def sanitize_environ(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy of the process environment with secret-looking variables redacted."""
    source = os.environ if environ is None else environ
    redacted: dict[str, str] = {}
    for key, value in source.items():
        if any(marker in key.upper() for marker in SENSITIVE_ENV_MARKERS):
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def default_request_info() -> dict[str, object]:
    """Inbound request headers and server variables for the current process.

    A plain Python process has no inbound request, so headers are empty;
    web integrations pass their own provider to the context.
    """
    return {"request_header": {}, "server": sanitize_environ()}
