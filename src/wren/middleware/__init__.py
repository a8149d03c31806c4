"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(ctx: RequestContext) -> Flow | bool | None

Built-in request stages:
    CORSPolicy -- permissive CORS headers and preflight replies
    RateLimiter -- per-client fixed-window request counting
"""

from wren.middleware.chain import MiddlewareChain
from wren.middleware.cors import CORSPolicy
from wren.middleware.protocol import CONTINUE, HALT, Flow, Middleware
from wren.middleware.rate_limit import RateLimiter, RateRecord

__all__ = [
    "CONTINUE",
    "HALT",
    "CORSPolicy",
    "Flow",
    "Middleware",
    "MiddlewareChain",
    "RateLimiter",
    "RateRecord",
]
