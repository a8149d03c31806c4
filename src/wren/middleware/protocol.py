"""Middleware protocol and the Flow result type.

A middleware is any callable matching::

    def my_mw(ctx: RequestContext) -> Flow | bool | None: ...
    async def my_mw(ctx: RequestContext) -> Flow | bool | None: ...

No base class required. The framework checks the shape, not the lineage.

The return value is the middleware's flow decision. ``HALT`` (or
``False``) means the middleware has already responded and nothing
after it runs, route handler included. ``CONTINUE``, ``True``, or
``None`` pass control to the next middleware.
"""

from __future__ import annotations

from collections.abc import Awaitable
from enum import Enum
from typing import TYPE_CHECKING, Protocol, TypeAlias

if TYPE_CHECKING:
    from wren.context import RequestContext


class Flow(Enum):
    """Outcome of a middleware step or of the whole chain."""

    CONTINUE = "continue"
    HALT = "halt"

    @classmethod
    def of(cls, result: object) -> Flow:
        """Interpret a middleware return value."""
        if result is cls.HALT or result is False:
            return cls.HALT
        return cls.CONTINUE


CONTINUE = Flow.CONTINUE
HALT = Flow.HALT

MiddlewareResult: TypeAlias = Flow | bool | None


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def request_id(ctx: RequestContext) -> Flow:
            ctx.state["request_id"] = uuid.uuid4().hex
            ctx.set_header("X-Request-ID", ctx.state["request_id"])
            return CONTINUE

        # Class middleware
        class RequireToken:
            async def __call__(self, ctx: RequestContext) -> Flow:
                if ctx.headers.get("authorization") != f"Bearer {self.token}":
                    ctx.send_json({"error": "Unauthorized"}, 401)
                    return HALT
                return CONTINUE
    """

    def __call__(
        self, ctx: RequestContext
    ) -> MiddlewareResult | Awaitable[MiddlewareResult]: ...
