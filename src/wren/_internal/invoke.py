"""Invoke helpers: call sync or async callables uniformly.

Route handlers, middleware, and error handlers can all be ``def`` or
``async def``. This module keeps the sync/async check in one place.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(handler, ctx)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def show_user(ctx):
            return {"id": ctx.params["id"]}

        # async: returns a coroutine, awaited here
        async def show_user(ctx):
            user = await load_user(ctx.params["id"])
            return {"user": user}
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
