"""The response a request ends with.

Handlers and middleware never write to the socket. They stage one of
these on the context and the dispatcher emits it after the lifecycle
finishes.
"""

from __future__ import annotations

import json as json_module
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """Status, content type, extra headers, and body.

    ``headers`` keeps every pair in the order it was added, so a name can
    repeat. ``content_type=None`` means no Content-Type header at all.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str | None = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Copy of this response with one more header pair."""
        return replace(self, headers=self.headers + ((name, value),))

    def header(self, name: str, default: str | None = None) -> str | None:
        """Value of the most recently added *name* header, any case."""
        wanted = name.lower()
        matches = [value for key, value in self.headers if key.lower() == wanted]
        return matches[-1] if matches else default

    @property
    def body_bytes(self) -> bytes:
        body = self.body
        return body.encode("utf-8") if isinstance(body, str) else body

    @property
    def text(self) -> str:
        body = self.body
        return body.decode("utf-8") if isinstance(body, bytes) else body

    def json(self) -> Any:
        return json_module.loads(self.body_bytes)


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect a handler can return instead of calling ``ctx.redirect``."""

    url: str
    status: int = 302
