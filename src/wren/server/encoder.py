"""Response encoding: serialization, content types, and compression.

The encoder turns a handler's payload into a staged ``Response`` on
the request context. When compression is enabled it negotiates the
content encoding from ``Accept-Encoding`` with a fixed preference:
gzip, then deflate, then identity.

Nothing is written to the transport here. The dispatcher emits the
staged response once, after the request lifecycle ends.
"""

from __future__ import annotations

import gzip
import json as json_module
import zlib
from enum import Enum
from typing import TYPE_CHECKING, Any

from wren.http.response import Redirect, Response

if TYPE_CHECKING:
    from wren.context import RequestContext

# Fixed priority order; identity is the implicit fallback
ENCODING_PREFERENCE: tuple[str, ...] = ("gzip", "deflate")


class BodyKind(Enum):
    """Serialization kind for ``ResponseEncoder.send``."""

    JSON = "application/json"
    TEXT = "text/plain; charset=utf-8"
    HTML = "text/html; charset=utf-8"

    @property
    def content_type(self) -> str:
        return self.value


def negotiate_encoding(accept_encoding: str | None) -> str | None:
    """Pick ``gzip`` or ``deflate`` from an Accept-Encoding value, else None.

    Tokens with ``q=0`` are refused; ``*`` accepts the first preference.
    """
    if not accept_encoding:
        return None

    accepted: set[str] = set()
    for token in accept_encoding.split(","):
        name, *params = (part.strip() for part in token.split(";"))
        if not name:
            continue
        if any(_is_zero_quality(param) for param in params):
            continue
        accepted.add(name.lower())

    for encoding in ENCODING_PREFERENCE:
        if encoding in accepted or "*" in accepted:
            return encoding
    return None


def _is_zero_quality(param: str) -> bool:
    key, _, value = param.partition("=")
    if key.strip().lower() != "q":
        return False
    try:
        return float(value) == 0.0
    except ValueError:
        return False


def compress(data: bytes, encoding: str, level: int = 6) -> bytes:
    """Apply the named content-coding to *data*."""
    if encoding == "gzip":
        return gzip.compress(data, compresslevel=level)
    if encoding == "deflate":
        # HTTP "deflate" is the zlib-wrapped format
        return zlib.compress(data, level)
    msg = f"Unsupported content encoding: {encoding!r}"
    raise ValueError(msg)


def serialize(payload: Any, kind: BodyKind) -> bytes:
    """Serialize *payload* for *kind*. JSON is compact; other kinds use ``str()``."""
    if kind is BodyKind.JSON:
        text = json_module.dumps(payload, separators=(",", ":"), default=str)
    elif isinstance(payload, bytes):
        return payload
    else:
        text = str(payload)
    return text.encode("utf-8")


class ResponseEncoder:
    """Builds and stages responses for a request context.

    One encoder is created per app (at freeze time) and shared by all
    requests; it holds only configuration.
    """

    __slots__ = ("compression", "level")

    def __init__(self, *, compression: bool = False, level: int = 6) -> None:
        self.compression = compression
        self.level = level

    def send(
        self,
        ctx: RequestContext,
        payload: Any,
        kind: BodyKind,
        status: int = 200,
    ) -> Response:
        """Serialize *payload*, negotiate compression, and stage the response."""
        body = serialize(payload, kind)
        response = Response(body=body, status=status, content_type=kind.content_type)

        if self.compression:
            response = response.with_header("Vary", "Accept-Encoding")
            encoding = negotiate_encoding(ctx.headers.get("accept-encoding"))
            if encoding is not None:
                response = Response(
                    body=compress(body, encoding, self.level),
                    status=status,
                    content_type=kind.content_type,
                    headers=(*response.headers, ("Content-Encoding", encoding)),
                )

        ctx.respond(response)
        return response

    def respond(self, ctx: RequestContext, response: Response) -> Response:
        """Stage a prebuilt response as-is."""
        ctx.respond(response)
        return response

    def redirect(self, ctx: RequestContext, url: str, status: int = 302) -> Response:
        """Stage an empty-bodied redirect. No content negotiation."""
        response = Response(body=b"", status=status, content_type=None).with_header(
            "Location", url
        )
        return self.respond(ctx, response)

    def negotiate(self, ctx: RequestContext, value: Any) -> Response:
        """Stage a response for a handler's return value.

        Dispatch order:

        1. ``Response``            -> staged as-is
        2. ``Redirect``            -> ``redirect()``
        3. ``(value, int)``        -> negotiate value with that status
        4. ``dict`` / ``list``     -> JSON
        5. ``str``                 -> HTML
        6. ``bytes``               -> application/octet-stream, uncompressed
        """
        status = 200
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], int):
            value, status = value

        match value:
            case Response():
                return self.respond(ctx, value if status == 200 else value.with_status(status))
            case Redirect():
                return self.redirect(ctx, value.url, value.status)
            case dict() | list():
                return self.send(ctx, value, BodyKind.JSON, status)
            case str():
                return self.send(ctx, value, BodyKind.HTML, status)
            case bytes():
                return self.respond(
                    ctx,
                    Response(body=value, status=status, content_type="application/octet-stream"),
                )
            case _:
                msg = (
                    f"Cannot convert {type(value).__name__} to a response. "
                    "Return a dict, list, str, bytes, Response, or Redirect."
                )
                raise TypeError(msg)
