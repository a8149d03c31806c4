"""Error recovery chain.

Registered error handlers are tried in registration order. Each gets
``(error, ctx)`` and returns whether it responded; the first truthy
return ends the search. When nobody claims the error it is logged and
answered with a generic 500.

The dispatcher never inspects errors itself. Handlers decide whether
an error is theirs, usually by matching on ``error.kind``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wren._internal.invoke import invoke
from wren._internal.types import ErrorHandler
from wren.server.encoder import BodyKind

if TYPE_CHECKING:
    from wren.context import RequestContext

logger = logging.getLogger("wren.server")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def default_error_payload(error: BaseException) -> dict[str, Any]:
    """Generic 500 body, with the error text when it can be rendered."""
    payload: dict[str, Any] = {"error": INTERNAL_ERROR_MESSAGE}
    try:
        message = str(error)
    except Exception:  # noqa: BLE001
        return payload
    if message:
        payload["message"] = message
    return payload


class ErrorDispatcher:
    """An immutable, ordered chain of error handlers."""

    __slots__ = ("_handlers",)

    def __init__(self, handlers: tuple[ErrorHandler, ...] = ()) -> None:
        self._handlers = handlers

    def __len__(self) -> int:
        return len(self._handlers)

    async def handle(self, error: BaseException, ctx: RequestContext) -> bool:
        """Offer *error* to each handler in order.

        Returns True if a handler claimed it, False if the default 500
        response was written instead.
        """
        for handler in self._handlers:
            try:
                claimed = await invoke(handler, error, ctx)
            except Exception:
                logger.exception(
                    "Error handler %s failed for %s %s",
                    getattr(handler, "__name__", type(handler).__name__),
                    ctx.method,
                    ctx.path,
                )
                continue
            if claimed:
                return True

        logger.error(
            "500 %s %s: unhandled %s",
            ctx.method,
            ctx.path,
            type(error).__name__,
            exc_info=_exc_info(error),
        )
        ctx.send_json(default_error_payload(error), 500)
        return False


def _exc_info(error: BaseException) -> BaseException:
    # Log the original traceback for wrapped foreign errors
    cause = getattr(error, "cause", None)
    if isinstance(cause, BaseException):
        return cause
    return error
