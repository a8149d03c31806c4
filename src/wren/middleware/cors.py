"""Permissive CORS handling.

When enabled, every response carries the configured
``Access-Control-Allow-*`` headers, and ``OPTIONS`` preflight requests
are answered with 204 before rate limiting, body decoding, middleware,
or routing run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from wren.http.response import Response

if TYPE_CHECKING:
    from wren.config import AppConfig
    from wren.context import RequestContext

PREFLIGHT_METHOD = "OPTIONS"


@dataclass(frozen=True, slots=True)
class CORSPolicy:
    """CORS header values. Defaults allow any origin.

    Built from ``AppConfig`` when the app freezes::

        CORSPolicy.from_config(AppConfig(cors=True))
    """

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")

    @classmethod
    def from_config(cls, config: AppConfig) -> CORSPolicy:
        return cls(
            allow_origin=config.cors_allow_origin,
            allow_methods=config.cors_allow_methods,
            allow_headers=config.cors_allow_headers,
        )

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """The headers added to every response."""
        return (
            ("Access-Control-Allow-Origin", self.allow_origin),
            ("Access-Control-Allow-Methods", ", ".join(self.allow_methods)),
            ("Access-Control-Allow-Headers", ", ".join(self.allow_headers)),
        )

    def apply(self, ctx: RequestContext) -> bool:
        """Stage CORS headers on *ctx*; answer preflight requests.

        Returns True when the request was a preflight and has been
        answered with 204 (the caller stops processing).
        """
        for name, value in self.headers:
            ctx.set_header(name, value)
        if ctx.method != PREFLIGHT_METHOD:
            return False
        ctx.respond(Response(body=b"", status=204, content_type=None))
        return True
