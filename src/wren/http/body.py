"""Request body decoding by content type.

The dispatcher buffers the whole body and decodes it once, before the
middleware chain runs. Handlers only ever see the decoded value on
``ctx.body``:

- ``application/json`` with a non-empty body -> parsed JSON value
- ``application/x-www-form-urlencoded`` -> ``dict[str, str]``
- anything else non-empty -> ``str``
- empty body, malformed JSON, or an unreadable body -> ``NO_BODY``

Decoding never fails a request.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Final, TypeAlias
from urllib.parse import unquote

from wren.errors import BodyDecodeError
from wren.http.request import Request

logger = logging.getLogger("wren.server")


@dataclass(frozen=True, slots=True)
class NoBody:
    """Sentinel for requests without a usable body.

    Falsy, and distinct from both ``""`` and ``None`` (a JSON ``null``
    body decodes to ``None``).
    """

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_BODY"


NO_BODY: Final = NoBody()

# JSON value, form dict, text, or NO_BODY
DecodedBody: TypeAlias = Any


def decode_body(raw: bytes, content_type: str | None) -> DecodedBody:
    """Materialize *raw* according to *content_type*."""
    ct = (content_type or "").lower()

    if "application/json" in ct and raw:
        try:
            return _decode_json(raw)
        except BodyDecodeError as exc:
            logger.debug("Discarding malformed JSON body: %s", exc)
            return NO_BODY

    if "application/x-www-form-urlencoded" in ct:
        return decode_form(raw)

    if raw:
        return raw.decode("utf-8", errors="replace")
    return NO_BODY


def decode_form(raw: bytes) -> dict[str, str]:
    """Split on ``&``, then on the first ``=``, percent-decoding both sides.

    ``+`` is left as-is. Empty pairs are skipped, a pair without ``=``
    maps to ``""``, and the last duplicate key wins.
    """
    form: dict[str, str] = {}
    for pair in raw.decode("utf-8", errors="replace").split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        form[unquote(key)] = unquote(value)
    return form


async def read_body(request: Request) -> DecodedBody:
    """Buffer the full request body and decode it.

    A transport failure while reading is absorbed like a decode failure.
    """
    try:
        raw = await request.body()
    except OSError as exc:
        logger.warning("Could not read body for %s %s: %s", request.method, request.path, exc)
        return NO_BODY
    return decode_body(raw, request.content_type)


def _decode_json(raw: bytes) -> Any:
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Malformed JSON body: {exc}"
        raise BodyDecodeError(msg, {"length": len(raw)}) from exc

