from __future__ import annotations

from typing import Callable, Iterator

import httpx
import pytest

from httpchain import HttpChainContext, HttpxTransport, set_default_context


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """MockTransport handler that remembers every request it served."""

    def __init__(self, respond: Handler | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.respond = respond or (
            lambda request: httpx.Response(200, content=b"ok", headers={"content-type": "text/plain"})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture(autouse=True)
def _isolated_default_context(monkeypatch) -> Iterator[None]:
    monkeypatch.delenv("HTTPCHAIN_DEFAULT_URL", raising=False)
    set_default_context(None)
    yield
    set_default_context(None)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_context(handler: RecordingHandler) -> Callable[..., HttpChainContext]:
    def factory(**kwargs) -> HttpChainContext:
        kwargs.setdefault("transport", HttpxTransport(transport=httpx.MockTransport(handler)))
        return HttpChainContext(**kwargs)

    return factory


@pytest.fixture
def context(make_context) -> HttpChainContext:
    return make_context()
