"""Routing: ordered route table with exact-first matching.

Routes are registered during setup. Exact patterns resolve through a
dict lookup; parameterized and wildcard patterns are scanned in
registration order.
"""

from wren.routing.group import RouteGroup
from wren.routing.route import MatchResult, PathSegment, Route, SegmentKind, parse_pattern
from wren.routing.router import RouteRegistry

__all__ = [
    "MatchResult",
    "PathSegment",
    "Route",
    "RouteGroup",
    "RouteRegistry",
    "SegmentKind",
    "parse_pattern",
]
