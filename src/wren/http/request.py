"""The inbound request as the dispatcher sees it.

Everything from the ASGI scope is captured up front in a frozen
dataclass. The body is the one lazy part: it is pulled from ``receive``
on first use and kept for later calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.http.headers import Headers
from wren.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """Request line, headers, and peer info, with a buffered body.

    Build one with ``Request.from_asgi(scope, receive)``.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    _receive: Receive = field(repr=False, compare=False)
    # Holds the buffered body once read; the dict itself is mutable
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        server, client = scope.get("server"), scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=(server[0], server[1]) if server else None,
            client=(client[0], client[1]) if client else None,
            _receive=receive,
        )

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """Declared body size, or None when absent or not a number."""
        declared = self.headers.get("content-length")
        if declared is not None and declared.isdigit():
            return int(declared)
        return None

    @property
    def url(self) -> str:
        """Path plus ``?query`` when the request had one."""
        raw_query = self.query._raw
        return f"{self.path}?{raw_query.decode('utf-8', 'replace')}" if raw_query else self.path

    @property
    def client_host(self) -> str | None:
        """Remote address reported by the server, if any."""
        return self.client[0] if self.client else None

    async def body(self) -> bytes:
        """The complete body. ``receive`` is drained on the first call only."""
        cached = self._cache.get("body")
        if cached is None:
            cached = self._cache["body"] = await self._drain()
        return cached

    async def _drain(self) -> bytes:
        buffer = bytearray()
        more = True
        while more:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            buffer += message.get("body", b"")
            more = message.get("more_body", False)
        return bytes(buffer)
