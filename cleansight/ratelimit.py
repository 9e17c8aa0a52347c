"""
Fixed-window request throttling per client.

Each client key (normally the remote address) gets max_requests per
window; the window starts at the client's first request and resets once
it has elapsed.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import threading
import time
from typing import Callable


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, client: str) -> RateLimitDecision:
        """Count one request from client and decide whether it may proceed."""
        now = self._clock()
        with self._lock:
            self._expire(now)
            started, count = self._windows.get(client, (now, 0))
            count += 1
            self._windows[client] = (started, count)
        reset = max(0, math.ceil(started + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_seconds=reset,
        )

    def _expire(self, now: float) -> None:
        stale = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in stale:
            del self._windows[key]
