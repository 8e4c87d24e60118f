"""
Fixed-window rate limiter.

Counters live in process memory and are guarded by a lock, so one limiter
instance can be shared by every request handled by the process.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset: float  # epoch seconds when the current window ends

    def retry_after(self, now: float) -> int:
        return max(1, int(round(self.reset - now)))


class FixedWindowRateLimiter:
    """Counts calls per key inside fixed windows of `window_seconds`."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}  # key -> (window end, count)
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """
        Count one call for `key` and report whether it is allowed.

        Args:
            key: Caller-scoped key, e.g. "sonar:search:<user id>"
            limit: Calls allowed per window
            window_seconds: Window length

        Returns:
            RateLimitResult; rejected calls are not counted
        """
        now = self._clock()
        reset = now - (now % window_seconds) + window_seconds

        with self._lock:
            self._evict_expired(now)
            _, count = self._windows.get(key, (reset, 0))

            if count >= limit:
                return RateLimitResult(success=False, remaining=0, reset=reset)

            count += 1
            self._windows[key] = (reset, count)
            return RateLimitResult(success=True, remaining=limit - count, reset=reset)

    def _evict_expired(self, now: float):
        expired = [key for key, (reset, _) in self._windows.items() if reset <= now]
        for key in expired:
            del self._windows[key]

    def __len__(self) -> int:
        """Number of keys with a live window."""
        with self._lock:
            return len(self._windows)

    def reset(self):
        with self._lock:
            self._windows.clear()


# Process-wide limiter
rate_limiter = FixedWindowRateLimiter()
