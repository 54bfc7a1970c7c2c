"""Call counter and ordered trace log."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from .utils import format_timestamp


@dataclass(frozen=True)
class TraceEntry:
    sequence_number: int
    timestamp: str
    method: str
    http_code: int
    url: str | None

    @property
    def key(self) -> str:
        return f"{self.sequence_number:02d}__{self.timestamp}"

    @property
    def line(self) -> str:
        return f"{self.method} {self.http_code} {self.url or ''}".rstrip()


class TraceRecorder:
    """Append-only record of executed calls.

    The counter grows on every execution; entries are only appended when the
    caller records the call, which the builder does while tracing is enabled.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._entries: list[TraceEntry] = []

    def count_call(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def record_call(self, method: str, http_code: int, url: str | None, *, date_format: str | None = None) -> TraceEntry:
        with self._lock:
            self._count += 1
            entry = TraceEntry(
                sequence_number=self._count,
                timestamp=format_timestamp(self._clock(), date_format),
                method=method,
                http_code=http_code,
                url=url,
            )
            self._entries.append(entry)
            return entry

    def get_call_count(self) -> int:
        return self._count

    def get_trace(self) -> dict[str, str]:
        with self._lock:
            return {entry.key: entry.line for entry in self._entries}

    def entries(self) -> list[TraceEntry]:
        with self._lock:
            return list(self._entries)
