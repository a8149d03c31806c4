"""Shared fixtures for wren unit tests."""

from collections.abc import Callable
from typing import TypeAlias

import pytest

from wren.context import RequestContext
from wren.http.request import Request
from wren.server.encoder import ResponseEncoder

ContextFactory: TypeAlias = Callable[..., RequestContext]


@pytest.fixture
def make_context() -> ContextFactory:
    """Build a RequestContext without going through the dispatcher."""

    def factory(
        method: str = "GET",
        path: str = "/",
        *,
        headers: dict[str, str] | None = None,
        query_string: bytes = b"",
        body: bytes = b"",
        encoder: ResponseEncoder | None = None,
    ) -> RequestContext:
        async def receive() -> dict:
            return {"type": "http.request", "body": body, "more_body": False}

        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in (headers or {}).items()
            ],
            "client": ("127.0.0.1", 0),
        }
        return RequestContext(Request.from_asgi(scope, receive), encoder or ResponseEncoder())

    return factory
