"""Sequential middleware driver.

Runs each middleware to completion, in registration order, and stops
at the first one that halts. Exceptions are not caught here: they
abort the chain and propagate to the dispatcher's error handling.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wren._internal.invoke import invoke
from wren.middleware.protocol import Flow, Middleware

if TYPE_CHECKING:
    from wren.context import RequestContext

logger = logging.getLogger("wren.server")


class MiddlewareChain:
    """An immutable, ordered sequence of middleware."""

    __slots__ = ("_middleware",)

    def __init__(self, middleware: tuple[Middleware, ...] = ()) -> None:
        self._middleware = middleware

    def __len__(self) -> int:
        return len(self._middleware)

    async def run(self, ctx: RequestContext) -> Flow:
        """Run every middleware in order; ``HALT`` as soon as one halts."""
        for mw in self._middleware:
            flow = Flow.of(await invoke(mw, ctx))
            if flow is Flow.HALT:
                logger.debug(
                    "Middleware %s halted %s %s",
                    getattr(mw, "__name__", type(mw).__name__),
                    ctx.method,
                    ctx.path,
                )
                return Flow.HALT
        return Flow.CONTINUE
