"""Callable shapes the app accepts at registration time.

Every alias allows a sync function or a coroutine function; the result
is awaited when it is awaitable.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from wren.context import RequestContext
    from wren.errors import AppError

# Route handler. A non-None return value (dict, str, Response, AppError, ...)
# is negotiated into a response when the handler did not send one.
Handler: TypeAlias = "Callable[[RequestContext], Any]"

# Error handler. A truthy result claims the error.
ErrorHandler: TypeAlias = "Callable[[AppError, RequestContext], bool | None | Awaitable[bool | None]]"

# Lifespan hook, called with no arguments.
Hook: TypeAlias = "Callable[[], Any]"
