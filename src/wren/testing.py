"""Test client for wren applications.

Uses the same Response type as production. Requests go through the
ASGI interface directly, no sockets involved.
"""

from __future__ import annotations

import json as json_module
from typing import Any
from urllib.parse import unquote

from wren.app import App
from wren.http.response import Response


class TestClient:
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/users/42")
            assert response.json() == {"id": "42"}

    Response headers come back lowercased, in wire order. Content-Type
    is lifted into ``response.content_type``; everything else, including
    Content-Length, stays in ``response.headers``.
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app", "client")

    def __init__(self, app: App, *, client: tuple[str, int] = ("127.0.0.1", 0)) -> None:
        self.app = app
        self.client = client

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        pass

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a POST request. ``json=`` encodes the payload and sets Content-Type."""
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PATCH request."""
        return await self.request("PATCH", path, headers=headers, body=body, json=json)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def options(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send an OPTIONS request."""
        return await self.request("OPTIONS", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
        client: tuple[str, int] | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        send_headers = dict(headers or {})
        payload = body or b""
        if json is not None:
            payload = json_module.dumps(json).encode("utf-8")
            send_headers.setdefault("content-type", "application/json")

        scope = _http_scope(method, path, send_headers, client or self.client)
        pending = [{"type": "http.request", "body": payload, "more_body": False}]
        captured = _Captured()

        async def receive() -> dict[str, Any]:
            return pending.pop() if pending else {"type": "http.disconnect"}

        await self.app(scope, receive, captured.send)
        return captured.response()


def _http_scope(
    method: str,
    target: str,
    headers: dict[str, str],
    client: tuple[str, int],
) -> dict[str, Any]:
    raw_path, _, query_string = target.partition("?")
    path = unquote(raw_path)
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "path": path,
        "raw_path": raw_path.encode("latin-1"),
        "query_string": query_string.encode("utf-8"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers.items()
        ],
        "server": ("testserver", 80),
        "client": client,
    }


class _Captured:
    """Collects the ASGI messages an app sends for one request."""

    __slots__ = ("chunks", "headers", "status")

    def __init__(self) -> None:
        self.status = 200
        self.headers: list[tuple[bytes, bytes]] = []
        self.chunks: list[bytes] = []

    async def send(self, message: dict[str, Any]) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.chunks.append(message.get("body", b""))

    def response(self) -> Response:
        content_type: str | None = None
        rest: list[tuple[str, str]] = []
        for raw_name, raw_value in self.headers:
            name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
            if name == "content-type":
                content_type = value
            else:
                rest.append((name, value))
        return Response(
            body=b"".join(self.chunks),
            status=self.status,
            content_type=content_type,
            headers=tuple(rest),
        )
