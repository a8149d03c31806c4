"""Fixed-window rate limiting per client.

Each client key gets a counter and a window deadline. Requests inside
the window count up to ``max_requests``; the first request after the
deadline starts a new window. Because windows are discrete, a client
can get up to twice the limit through across a window edge. That is
accepted behavior, not something to "fix" with a sliding window.

Records are never deleted. A stale record just rolls over on its
key's next request; there is no background sweep.

Thread safety:
    A table lock guards slot creation only. Each key's read-modify-write
    happens under that key's own lock, so clients never contend with
    each other and no update is lost under free-threading.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field

from wren.http.request import Request

logger = logging.getLogger("wren.ratelimit")

DEFAULT_CLIENT_KEY = "127.0.0.1"


@dataclass(slots=True)
class RateRecord:
    """Request count for one client in its current window."""

    count: int
    window_reset_at: float  # milliseconds, same clock as ``now``


@dataclass(slots=True)
class _Slot:
    record: RateRecord
    lock: threading.Lock = field(default_factory=threading.Lock)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RateLimiter:
    """In-memory fixed-window limiter.

    Usage::

        limiter = RateLimiter(max_requests=2, window_ms=1000)
        limiter.admit("10.0.0.1", now=0)     # True
        limiter.admit("10.0.0.1", now=0)     # True
        limiter.admit("10.0.0.1", now=0)     # False
        limiter.admit("10.0.0.1", now=1001)  # True, new window
    """

    __slots__ = ("_lock", "_slots", "max_requests", "window_ms")

    def __init__(self, max_requests: int = 100, window_ms: int = 60_000) -> None:
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._lock = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def admit(self, client_key: str, now: float | None = None) -> bool:
        """Count a request from *client_key*; False when over the limit."""
        if now is None:
            now = monotonic_ms()

        slot = self._slots.get(client_key)
        if slot is None:
            with self._lock:
                slot = self._slots.get(client_key)
                if slot is None:
                    self._slots[client_key] = _Slot(RateRecord(1, now + self.window_ms))
                    return True

        with slot.lock:
            record = slot.record
            if now > record.window_reset_at:
                record.count = 1
                record.window_reset_at = now + self.window_ms
                return True
            if record.count >= self.max_requests:
                logger.debug("Rate limit exceeded for %s (%d requests)", client_key, record.count)
                return False
            record.count += 1
            return True

    def retry_after(self, client_key: str, now: float | None = None) -> int:
        """Whole seconds until *client_key*'s window resets (at least 1)."""
        if now is None:
            now = monotonic_ms()
        slot = self._slots.get(client_key)
        if slot is None:
            return 1
        with slot.lock:
            remaining_ms = slot.record.window_reset_at - now
        return max(1, math.ceil(remaining_ms / 1000.0))

    def record(self, client_key: str) -> RateRecord | None:
        """Snapshot of *client_key*'s record, or None if never seen."""
        slot = self._slots.get(client_key)
        if slot is None:
            return None
        with slot.lock:
            return RateRecord(slot.record.count, slot.record.window_reset_at)


def client_key(request: Request, key_header: str | None = None) -> str:
    """Identify the client: forwarding header first hop, then remote address."""
    if key_header:
        raw = request.headers.get(key_header)
        if raw:
            # Standard comma-separated proxy chain, first hop is the client.
            forwarded = raw.split(",")[0].strip()
            if forwarded:
                return forwarded
    return request.client_host or DEFAULT_CLIENT_KEY
