"""httpchain exceptions."""

from __future__ import annotations


class HttpChainError(Exception):
    """Base exception for all httpchain failures."""

    default_status_code: int | None = None

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code if status_code is not None else self.default_status_code
        self.body = body
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class HttpChainConfigError(HttpChainError):
    """Raised when a builder argument cannot be understood."""


class HttpChainCallbackError(HttpChainError):
    """Raised when a callback stage fails and exceptions are enabled."""

    default_status_code = 406
