"""Per-request context.

``RequestContext`` is the mutable bag handed to middleware, route
handlers, and error handlers. It exposes the decoded request pieces
(``params``, ``query``, ``body``), a free-form ``state`` dict for
middleware to pass data along, and the response operations.

Responses are staged, not written: ``send_json()`` and friends record
the response, and the dispatcher emits it exactly once when the
lifecycle ends. Sending twice is a programming error; the later
response wins and a warning is logged.

``context_var`` holds the active context for code that cannot take it
as a parameter. ``ContextVar`` is task-local under asyncio, so no
locks are needed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from wren.http.body import NO_BODY, DecodedBody
from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Response
from wren.server.encoder import BodyKind

if TYPE_CHECKING:
    from wren.server.encoder import ResponseEncoder

logger = logging.getLogger("wren.server")


class RequestContext:
    """Everything one request's lifecycle reads and writes."""

    __slots__ = (
        "_encoder",
        "_staged_headers",
        "body",
        "params",
        "query",
        "request",
        "response",
        "state",
    )

    def __init__(self, request: Request, encoder: ResponseEncoder) -> None:
        self.request = request
        self._encoder = encoder
        self.params: Mapping[str, str] = {}
        self.query: QueryParams = request.query
        self.body: DecodedBody = NO_BODY
        self.state: dict[str, Any] = {}
        self.response: Response | None = None
        self._staged_headers: list[tuple[str, str]] = []

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.path} sent={self.response_sent}>"

    # -- Request shortcuts --

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def headers(self) -> Headers:
        return self.request.headers

    @property
    def response_sent(self) -> bool:
        """True once a response has been staged for this request."""
        return self.response is not None

    # -- Response operations --

    def set_header(self, name: str, value: str) -> None:
        """Add a header to whatever response this request ends with."""
        self._staged_headers.append((name, value))

    def send_json(self, payload: Any, status: int = 200) -> None:
        self._encoder.send(self, payload, BodyKind.JSON, status)

    def send_text(self, text: str, status: int = 200) -> None:
        self._encoder.send(self, text, BodyKind.TEXT, status)

    def send_html(self, html: str, status: int = 200) -> None:
        self._encoder.send(self, html, BodyKind.HTML, status)

    def redirect(self, url: str, status: int = 302) -> None:
        self._encoder.redirect(self, url, status)

    def respond(self, response: Response) -> None:
        """Stage a prebuilt response. Last write wins."""
        if self.response is not None:
            logger.warning(
                "Response already sent for %s %s; replacing %d with %d",
                self.method,
                self.path,
                self.response.status,
                response.status,
            )
        self.response = response

    def final_response(self) -> Response:
        """The response to emit, with staged headers applied.

        A request that never responded ends with an empty 204.
        """
        response = self.response
        if response is None:
            response = Response(body=b"", status=204, content_type=None)
        if self._staged_headers:
            response = Response(
                body=response.body,
                status=response.status,
                content_type=response.content_type,
                headers=(*self._staged_headers, *response.headers),
            )
        return response


context_var: ContextVar[RequestContext] = ContextVar("wren_context")
"""The current request context. Set by the dispatcher for each request."""


def get_context() -> RequestContext:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()
