"""Small helpers shared by the builder and the built-in callback stages."""

from __future__ import annotations

import html
import json
import math
import time
from datetime import datetime
from typing import Any, Mapping

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def readable_bytes(size: float | int | None, precision: int = 2, units: tuple[str, ...] = BYTE_UNITS) -> str:
    """Format a byte count as ``"1.50 MB"``."""
    if not size or size <= 0:
        return f"0 {units[0]}"
    index = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    return f"{size / 1024 ** index:.{precision}f} {units[index]}"


def is_json_string(value: Any, strict: bool = True) -> bool:
    """Return True if ``value`` is a JSON document; strict mode requires a JSON object."""
    if not isinstance(value, (str, bytes, bytearray)):
        return False
    try:
        decoded = json.loads(value)
    except ValueError:
        return False
    return isinstance(decoded, dict) if strict else True


def is_json_object(value: Any) -> bool:
    """Return True if ``value`` is a structure that serializes to a JSON array or object."""
    return isinstance(value, (Mapping, list, tuple))


def format_timestamp(
    timestamp: float | None = None,
    date_format: str | None = None,
    cut: int = 2,
) -> str:
    """Format a wall-clock timestamp in local time, keeping 4 microsecond digits by default."""
    moment = datetime.fromtimestamp(time.time() if timestamp is None else timestamp).astimezone()
    formatted = moment.strftime(date_format or DEFAULT_DATE_FORMAT)
    return formatted[:-cut] if cut > 0 else formatted


def timestamp_diff(start: float | datetime, end: float | datetime, cut: int = 2) -> str:
    """Return ``"SS.ffff"`` for the time between two moments."""
    if isinstance(start, datetime):
        start = start.timestamp()
    if isinstance(end, datetime):
        end = end.timestamp()
    delta = abs(end - start)
    seconds = int(delta)
    micros = int(round((delta - seconds) * 1_000_000))
    if micros == 1_000_000:
        seconds, micros = seconds + 1, 0
    formatted = f"{seconds:02d}.{micros:06d}"
    return formatted[:-cut] if cut > 0 else formatted


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def trim(value: Any, characters: str | None = None) -> Any:
    return value.strip(characters) if isinstance(value, str) else value


def json_decode(value: Any, strict: bool = True, **kwargs: Any) -> Any:
    return json.loads(value, strict=strict, **kwargs)


def json_encode(value: Any, pretty: bool = False) -> str:
    return json.dumps(value, indent=2 if pretty else None, default=str)


def html_escape(value: str, quote: bool = True) -> str:
    return html.escape(value, quote=quote)


BUILTIN_FUNCTIONS = {
    "trim": trim,
    "json_decode": json_decode,
    "json_encode": json_encode,
    "html_escape": html_escape,
    "is_json_string": is_json_string,
    "is_json_object": is_json_object,
    "is_string": is_string,
}
