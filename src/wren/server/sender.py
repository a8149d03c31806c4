"""Writes a staged Response out as ASGI messages."""

from wren._internal.asgi import Send
from wren.http.response import Response

# Statuses that never carry a message body
_BODYLESS = frozenset({204, 304})


def _encode_headers(response: Response, length: int) -> list[tuple[bytes, bytes]]:
    pairs = [(name.lower(), value) for name, value in response.headers]
    if response.content_type is not None:
        pairs.insert(0, ("content-type", response.content_type))
    pairs.append(("content-length", str(length)))
    return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send) -> None:
    """Emit *response* as one start message and one body message.

    Content-Length is always set. Informational, 204 and 304 responses
    go out with an empty body whatever the Response holds.
    """
    status = response.status
    body = b"" if status < 200 or status in _BODYLESS else response.body_bytes
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": _encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": body})
