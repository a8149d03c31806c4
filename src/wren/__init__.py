"""Wren: a small ASGI framework for JSON APIs.

Routes with ``:param`` and trailing ``*`` patterns, a flow-controlled
middleware chain, kind-based error handlers, and optional CORS, rate
limiting, and response compression.

Basic usage::

    from wren import App

    app = App(cors=True, compression=True)

    @app.get("/users/:id")
    def show_user(ctx):
        ctx.send_json({"id": ctx.params["id"]})

    app.run()
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "CONTINUE",
    "HALT",
    "NO_BODY",
    "App",
    "AppConfig",
    "AppError",
    "BodyDecodeError",
    "BodyKind",
    "ConfigurationError",
    "ErrorKind",
    "Flow",
    "HandlerError",
    "Middleware",
    "RateLimitExceeded",
    "Redirect",
    "Request",
    "RequestContext",
    "Response",
    "RouteNotFound",
    "ValidationFailure",
    "WrenError",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name == "NO_BODY":
        from wren.http.body import NO_BODY

        return NO_BODY

    if name == "BodyKind":
        from wren.server.encoder import BodyKind

        return BodyKind

    if name in ("CONTINUE", "HALT", "Flow", "Middleware"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "AppError",
        "BodyDecodeError",
        "ConfigurationError",
        "ErrorKind",
        "HandlerError",
        "RateLimitExceeded",
        "RouteNotFound",
        "ValidationFailure",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
