"""Wren application class.

Registration happens at import time on a mutable App. The first request
(or lifespan startup) compiles it into tuples and a frozen router.
"""

import dataclasses
import inspect
import logging
import threading
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import ErrorHandler, Handler, Hook
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.middleware.chain import MiddlewareChain
from wren.middleware.cors import CORSPolicy
from wren.middleware.protocol import Middleware
from wren.middleware.rate_limit import RateLimiter
from wren.routing.group import RouteGroup
from wren.routing.route import Route
from wren.routing.router import RouteRegistry
from wren.server.encoder import ResponseEncoder
from wren.server.errors import ErrorDispatcher
from wren.server.handler import handle_request

logger = logging.getLogger("wren.server")


class App(RouteGroup):
    """The wren application.

    Routes are registered with the verb helpers, either directly or as
    decorators::

        app = App(cors=True)

        @app.get("/users/:id")
        def show(ctx):
            ctx.send_json({"id": ctx.params["id"]})

        app.post("/echo", lambda ctx: ctx.send_json(ctx.body))

    Thread safety:
        Setup is single-threaded (registration at import time). The
        freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several ASGI workers take
        their first request at once.
    """

    __slots__ = (
        "_cors",
        "_encoder",
        "_error_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_rate_limiter",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None, **overrides: Any) -> None:
        super().__init__("", self._add_route)
        base = config or AppConfig()
        try:
            self.config: AppConfig = dataclasses.replace(base, **overrides) if overrides else base
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc

        self._router = RouteRegistry()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: list[ErrorHandler] = []
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, replaced in _freeze()
        self._middleware = MiddlewareChain()
        self._error_dispatcher = ErrorDispatcher()
        self._encoder = ResponseEncoder()
        self._cors: CORSPolicy | None = None
        self._rate_limiter: RateLimiter | None = None

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "setup"
        return f"<App routes={len(self._router)} {state}>"

    # -- Registration --

    def _add_route(self, method: str, pattern: str, handler: Handler) -> Route:
        self._check_not_frozen()
        return self._router.register(method, pattern, handler)

    def use(self, middleware: Middleware) -> Middleware:
        """Append *middleware* to the chain. Usable as a decorator::

            @app.use
            def auth(ctx):
                if ctx.headers.get("authorization") is None:
                    ctx.send_json({"error": "Unauthorized"}, 401)
                    return HALT
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)
        return middleware

    def on_error(self, handler: ErrorHandler) -> ErrorHandler:
        """Append an error handler. Handlers return True to claim the error."""
        self._check_not_frozen()
        self._error_handlers.append(handler)
        return handler

    def on_startup(self, func: Hook) -> Hook:
        """Register a hook run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register a hook run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    @property
    def routes(self) -> list[Route]:
        """Registered routes in match order."""
        return self._router.routes

    @property
    def rate_limiter(self) -> RateLimiter | None:
        """The live limiter once frozen, if rate limiting is enabled."""
        return self._rate_limiter

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce.

        Requires the ``server`` extra (``pip install wren[server]``).
        Any other ASGI server can serve the app object directly.
        """
        self._ensure_frozen()

        from pounce.config import ServerConfig
        from pounce.server import Server

        server_config = ServerConfig(
            host=host or self.config.host,
            port=port or self.config.port,
            workers=1,
            reload=self.config.debug,
        )
        Server(server_config, self).run()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            config=self.config,
            router=self._router,
            middleware=self._middleware,
            error_dispatcher=self._error_dispatcher,
            encoder=self._encoder,
            cors=self._cors,
            rate_limiter=self._rate_limiter,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup, run hooks, and report back to the server."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await _run_hooks(self._startup_hooks)
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await _run_hooks(self._shutdown_hooks)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile registrations into immutable runtime state.

        Caller holds ``_freeze_lock``.
        """
        config = self.config
        config.validate()

        self._router.compile()
        self._middleware = MiddlewareChain(tuple(self._middleware_list))
        self._error_dispatcher = ErrorDispatcher(tuple(self._error_handlers))
        self._encoder = ResponseEncoder(
            compression=config.compression, level=config.compression_level
        )
        self._cors = CORSPolicy.from_config(config) if config.cors else None
        if config.rate_limit:
            self._rate_limiter = RateLimiter(
                max_requests=config.rate_max_requests, window_ms=config.rate_window_ms
            )

        self._frozen = True
        logger.debug(
            "App frozen: %d routes, %d middleware, %d error handlers",
            len(self._router),
            len(self._middleware),
            len(self._error_dispatcher),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)


async def _run_hooks(hooks: list[Hook]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result
