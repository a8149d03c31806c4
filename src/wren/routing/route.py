"""Route, PathSegment, and MatchResult frozen dataclasses."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from wren.errors import ConfigurationError
from wren.http.query import QueryParams

WILDCARD_PARAM = "wildcard"


class SegmentKind(Enum):
    LITERAL = "literal"
    PARAM = "param"
    WILDCARD = "wildcard"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:  ``users``  (kind=LITERAL)
    Param:    ``:id``    (kind=PARAM, value="id")
    Wildcard: ``*``      (kind=WILDCARD, trailing only)
    """

    value: str
    kind: SegmentKind = SegmentKind.LITERAL

    @property
    def is_param(self) -> bool:
        return self.kind is SegmentKind.PARAM


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition, unique by ``(method, pattern)``."""

    method: str
    pattern: str
    handler: Callable[..., Any]
    segments: tuple[PathSegment, ...] = field(default=(), compare=False, repr=False)

    @property
    def is_wildcard(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is SegmentKind.WILDCARD

    @property
    def is_static(self) -> bool:
        return all(seg.kind is SegmentKind.LITERAL for seg in self.segments)

    @property
    def prefix(self) -> str:
        """Everything before the trailing ``/*`` of a wildcard pattern."""
        return self.pattern[:-2] if self.is_wildcard else self.pattern


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Result of a successful route match."""

    route: Route
    params: Mapping[str, str]
    query: QueryParams

    @property
    def handler(self) -> Callable[..., Any]:
        return self.route.handler


def parse_pattern(pattern: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments, split on ``/``.

    Examples::

        "/users"      -> (LITERAL "", LITERAL "users")
        "/users/:id"  -> (LITERAL "", LITERAL "users", PARAM "id")
        "/static/*"   -> (LITERAL "", LITERAL "static", WILDCARD "*")

    Raises ``ConfigurationError`` for a wildcard anywhere but the final
    ``/*`` or for a parameter without a name.
    """
    parts = pattern.split("/")
    segments: list[PathSegment] = []
    for index, part in enumerate(parts):
        if part == "*":
            if index != len(parts) - 1 or index == 0:
                msg = (
                    f"Invalid route pattern {pattern!r}: a wildcard is only "
                    "allowed as the final '/*' segment."
                )
                raise ConfigurationError(msg)
            segments.append(PathSegment("*", SegmentKind.WILDCARD))
        elif "*" in part:
            msg = f"Invalid route pattern {pattern!r}: '*' must be a whole segment."
            raise ConfigurationError(msg)
        elif part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Invalid route pattern {pattern!r}: parameter segment needs a name."
                raise ConfigurationError(msg)
            segments.append(PathSegment(name, SegmentKind.PARAM))
        else:
            segments.append(PathSegment(part))
    return tuple(segments)
