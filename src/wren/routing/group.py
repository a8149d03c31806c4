"""Prefix groups: registration-time sugar over ``RouteRegistry.register``.

A group rewrites each pattern to ``prefix + pattern`` and forwards the
registration. Nothing about a group survives to request time.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from wren._internal.types import Handler

if TYPE_CHECKING:
    from wren.routing.route import Route


class RouteGroup:
    """Registers routes under a shared path prefix.

    Works both with a callback and directly::

        app.group("/api/users", lambda users: users.get("", list_users))

        api = app.group("/api")
        api.get("/status", status)          # registers GET /api/status
        admin = api.group("/admin")         # nested: prefix "/api/admin"
    """

    __slots__ = ("_register", "prefix")

    def __init__(self, prefix: str, register: Callable[[str, str, Handler], Route]) -> None:
        self.prefix = prefix
        self._register = register

    def add(self, method: str, pattern: str, handler: Handler) -> Route:
        """Register *handler* for ``prefix + pattern``."""
        return self._register(method, self.prefix + pattern, handler)

    def route(
        self,
        pattern: str,
        handler: Handler | None = None,
        *,
        methods: list[str] | None = None,
    ) -> Any:
        """Register for several methods at once; decorator when *handler* is omitted."""
        method_list = methods or ["GET"]

        def decorator(func: Handler) -> Handler:
            for method in method_list:
                self.add(method, pattern, func)
            return func

        if handler is None:
            return decorator
        decorator(handler)
        return self

    def get(self, pattern: str, handler: Handler | None = None) -> Any:
        return self.route(pattern, handler, methods=["GET"])

    def post(self, pattern: str, handler: Handler | None = None) -> Any:
        return self.route(pattern, handler, methods=["POST"])

    def put(self, pattern: str, handler: Handler | None = None) -> Any:
        return self.route(pattern, handler, methods=["PUT"])

    def delete(self, pattern: str, handler: Handler | None = None) -> Any:
        return self.route(pattern, handler, methods=["DELETE"])

    def patch(self, pattern: str, handler: Handler | None = None) -> Any:
        return self.route(pattern, handler, methods=["PATCH"])

    def group(
        self,
        prefix: str,
        callback: Callable[[RouteGroup], Any] | None = None,
    ) -> RouteGroup:
        """Open a nested group whose prefix extends this one."""
        nested = RouteGroup(self.prefix + prefix, self._register)
        if callback is not None:
            callback(nested)
        return nested
