"""Route registry with exact-first, then ordered structural matching.

Routes are registered during setup and frozen when the app freezes.
"""

from collections.abc import Callable
from typing import Any

from wren.errors import RouteNotFound
from wren.http.query import QueryParams
from wren.routing.route import (
    WILDCARD_PARAM,
    MatchResult,
    Route,
    SegmentKind,
    parse_pattern,
)


class RouteRegistry:
    """Ordered route table.

    Matching order:

    1. Exact literal lookup on ``(method, path)``: always wins.
    2. Patterns registered for the method, in registration order.
       The first structural match wins.

    Usage::

        registry = RouteRegistry()
        registry.register("GET", "/users/:id", show_user)
        registry.register("GET", "/static/*", serve_asset)
        match = registry.match("GET", "/users/42?fields=name")
        match.params  # {"id": "42"}
        match.query   # {"fields": "name"}
    """

    __slots__ = ("_by_method", "_compiled", "_exact")

    def __init__(self) -> None:
        # (method, pattern) -> Route; doubles as the exact-match index
        self._exact: dict[tuple[str, str], Route] = {}
        # method -> {pattern: Route} in first-registration order
        self._by_method: dict[str, dict[str, Route]] = {}
        self._compiled = False

    def register(self, method: str, pattern: str, handler: Callable[..., Any]) -> Route:
        """Add a route, replacing any earlier one with the same method and pattern.

        A replaced route keeps its original position in the scan order.
        """
        if self._compiled:
            msg = "Cannot register routes after compilation."
            raise RuntimeError(msg)

        method = method.upper()
        route = Route(method, pattern, handler, parse_pattern(pattern))
        self._exact[(method, pattern)] = route
        self._by_method.setdefault(method, {})[pattern] = route
        return route

    def compile(self) -> None:
        """Freeze the registry. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """All registered routes, grouped by method, in scan order."""
        return [route for table in self._by_method.values() for route in table.values()]

    def __len__(self) -> int:
        return len(self._exact)

    def match(self, method: str, url: str, *, query: QueryParams | None = None) -> MatchResult:
        """Match a request method and URL (path with optional ``?query``).

        When *query* is given, *url* is taken as an already-split path and
        is not searched for ``?``: a decoded ``%3F`` stays part of the path.

        Raises ``RouteNotFound`` if no route matches.
        """
        if query is None:
            path, _, query_string = url.partition("?")
            query = QueryParams(query_string)
        else:
            path = url

        route = self._exact.get((method, path))
        if route is not None and route.is_static:
            return MatchResult(route=route, params={}, query=query)

        for route in self._by_method.get(method, {}).values():
            params = _match_route(route, path)
            if params is not None:
                return MatchResult(route=route, params=params, query=query)

        raise RouteNotFound(method=method, path=path)


def _match_route(route: Route, path: str) -> dict[str, str] | None:
    """Structural match of one route against a request path."""
    if route.is_wildcard:
        prefix = route.prefix
        if path.startswith(prefix):
            return {WILDCARD_PARAM: path[len(prefix) :]}
        return None

    parts = path.split("/")
    if len(parts) != len(route.segments):
        return None

    params: dict[str, str] = {}
    for segment, part in zip(route.segments, parts, strict=True):
        if segment.kind is SegmentKind.PARAM:
            params[segment.value] = part
        elif segment.value != part:
            return None
    return params
