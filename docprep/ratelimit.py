"""Fixed-window rate limiting keyed by caller identity."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass(frozen=True)
class RateLimitInfo:
    remaining: int
    reset_at: float


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Allows ``limit`` calls per key within each window.

    State lives on the instance, so every app or test gets its own counters.
    """

    def __init__(
        self,
        limit: int = 5,
        window_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> bool:
        """Count one call for ``key``; False once the window is used up."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            window = self._windows.get(key)
            if window is None:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return True
            if window.count >= self.limit:
                return False
            window.count += 1
            return True

    def info(self, key: str) -> RateLimitInfo:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                return RateLimitInfo(remaining=self.limit, reset_at=now + self.window_seconds)
            return RateLimitInfo(
                remaining=max(0, self.limit - window.count), reset_at=window.reset_at
            )

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]


__all__ = ["FixedWindowRateLimiter", "RateLimitInfo"]
