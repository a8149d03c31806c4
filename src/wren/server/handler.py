"""ASGI handler: runs one request through the dispatch lifecycle.

The only component that touches raw ASGI directly. Converts the scope
to a typed Request, drives it through the fixed sequence of stages,
and sends the staged Response back through ASGI send() exactly once::

    Received -> CORS preflight -> rate limit -> body decode
             -> middleware -> route match -> handler -> Responded

Any exception raised after ``Received`` goes to the error dispatcher,
which always leaves a response behind.
"""

import logging
import time

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.context import RequestContext, context_var
from wren.errors import AppError, HandlerError, RateLimitExceeded, RouteNotFound
from wren.http.body import read_body
from wren.http.request import Request
from wren.middleware.chain import MiddlewareChain
from wren.middleware.cors import CORSPolicy
from wren.middleware.protocol import Flow
from wren.middleware.rate_limit import RateLimiter, client_key
from wren.routing.router import RouteRegistry
from wren.server.encoder import BodyKind, ResponseEncoder
from wren.server.errors import ErrorDispatcher
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")
access_logger = logging.getLogger("wren.access")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    config: AppConfig,
    router: RouteRegistry,
    middleware: MiddlewareChain,
    error_dispatcher: ErrorDispatcher,
    encoder: ResponseEncoder,
    cors: CORSPolicy | None = None,
    rate_limiter: RateLimiter | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    ctx = RequestContext(request, encoder)
    started = time.perf_counter()
    if config.logging:
        access_logger.info("%s %s", request.method, request.url)

    token = context_var.set(ctx)
    try:
        await _run_lifecycle(
            ctx,
            config=config,
            router=router,
            middleware=middleware,
            error_dispatcher=error_dispatcher,
            encoder=encoder,
            cors=cors,
            rate_limiter=rate_limiter,
        )
    finally:
        context_var.reset(token)

    response = ctx.final_response()
    try:
        await send_response(response, send)
    except OSError as exc:
        # Client went away; nothing left to write to.
        logger.debug("Dropped response for %s %s: %s", request.method, request.path, exc)

    if config.logging:
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "%s %s -> %d (%.1fms)", request.method, request.url, response.status, elapsed_ms
        )


async def _run_lifecycle(
    ctx: RequestContext,
    *,
    config: AppConfig,
    router: RouteRegistry,
    middleware: MiddlewareChain,
    error_dispatcher: ErrorDispatcher,
    encoder: ResponseEncoder,
    cors: CORSPolicy | None,
    rate_limiter: RateLimiter | None,
) -> None:
    """Run the lifecycle stages; every exit leaves ``ctx`` responded or empty."""
    request = ctx.request

    if cors is not None and cors.apply(ctx):
        return

    try:
        if rate_limiter is not None:
            key = client_key(request, config.rate_limit_key_header)
            if not rate_limiter.admit(key):
                rejected = RateLimitExceeded()
                ctx.set_header("Retry-After", str(rate_limiter.retry_after(key)))
                encoder.send(ctx, {"error": rejected.message}, BodyKind.JSON, rejected.status)
                return

        ctx.body = await read_body(request)

        if await middleware.run(ctx) is Flow.HALT:
            return

        try:
            match = router.match(request.method, request.path, query=request.query)
        except RouteNotFound as exc:
            encoder.send(ctx, exc.to_payload(), BodyKind.JSON, exc.status)
            return

        ctx.params = match.params
        ctx.query = match.query

        result = await invoke(match.handler, ctx)
        if isinstance(result, AppError):
            await error_dispatcher.handle(result, ctx)
        elif result is not None and not ctx.response_sent:
            encoder.negotiate(ctx, result)

    except Exception as exc:
        error = exc if isinstance(exc, AppError) else HandlerError.wrap(exc)
        await error_dispatcher.handle(error, ctx)

