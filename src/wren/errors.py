"""Wren exception hierarchy.

Shared across the router, dispatcher, middleware, and handlers so every
module raises and catches the same types.

Request-level failures are ``AppError`` instances: dataclass exceptions with
an explicit ``kind`` so error handlers can branch on a closed set of
values instead of inspecting exception classes or ad hoc attributes::

    @app.on_error
    def validation(error: AppError, ctx: RequestContext) -> bool:
        if error.kind is not ErrorKind.VALIDATION:
            return False
        ctx.send_json(error.to_payload(), error.status)
        return True
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration or route registration is invalid.

    Typically raised during registration or ``App._freeze()`` at startup.
    """


class ErrorKind(StrEnum):
    """Closed classification of request-level failures."""

    BODY_DECODE = "body_decode"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    HANDLER = "handler"
    VALIDATION = "validation"


@dataclass(eq=False)
class AppError(WrenError):
    """A structured request-level failure.

    ``details`` carries kind-specific data (field errors, limits, ...).
    ``cause`` holds the original exception when a foreign error was
    wrapped by the dispatcher.
    """

    message: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)
    kind: ErrorKind = ErrorKind.HANDLER
    status: int = 500
    cause: BaseException | None = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return self.message or self.kind.value

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready representation for error responses."""
        payload: dict[str, Any] = {"error": str(self), "kind": self.kind.value}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


@dataclass(eq=False)
class BodyDecodeError(AppError):
    """Request body could not be decoded. Absorbed by the body decoder."""

    kind: ErrorKind = ErrorKind.BODY_DECODE
    status: int = 400


@dataclass(eq=False)
class RateLimitExceeded(AppError):
    """Client exceeded its request allowance for the current window."""

    message: str = "Too many requests"
    kind: ErrorKind = ErrorKind.RATE_LIMITED
    status: int = 429


@dataclass(eq=False)
class RouteNotFound(AppError):
    """404: no route matched the request method and path."""

    message: str = "Not found"
    kind: ErrorKind = ErrorKind.NOT_FOUND
    status: int = 404
    method: str = ""
    path: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "method": self.method, "path": self.path}


@dataclass(eq=False)
class HandlerError(AppError):
    """Any failure raised while running middleware or a route handler."""

    @classmethod
    def wrap(cls, exc: BaseException) -> HandlerError:
        """Wrap a foreign exception, keeping it as ``cause``."""
        try:
            message = str(exc)
        except Exception:  # noqa: BLE001
            message = ""
        return cls(message=message or type(exc).__name__, cause=exc)


@dataclass(eq=False)
class ValidationFailure(HandlerError):  # noqa: N818
    """Malformed client input. Raise (or return) from handlers::

        raise ValidationFailure("Validation failed", {"fields": {"name": "required"}})
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    status: int = 400
