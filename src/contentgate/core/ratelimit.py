"""In-process fixed-window rate limiting keyed by client IP.

Counters live in process memory, so limits apply per gateway instance.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class RateLimitWindow:
    """Request count of one client within the current window."""

    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Allow at most ``limit`` requests per client per ``window`` seconds.

    Usage:
        ```python
        limiter = FixedWindowRateLimiter(limit=100, window=60)
        allowed, retry_after = limiter.hit("203.0.113.7")
        ```
    """

    MAX_TRACKED_CLIENTS = 10_000

    def __init__(
        self,
        limit: int,
        window: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}

    def hit(self, client_id: str) -> tuple[bool, int]:
        """Record a request.

        Returns:
            Tuple of (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        now = self._clock()

        bucket = self._windows.get(client_id)
        if bucket is None or now - bucket.started_at >= self.window:
            if len(self._windows) >= self.MAX_TRACKED_CLIENTS:
                self._evict_expired(now)
            bucket = RateLimitWindow(started_at=now)
            self._windows[client_id] = bucket

        if bucket.count >= self.limit:
            retry_after = max(1, math.ceil(bucket.started_at + self.window - now))
            return False, retry_after

        bucket.count += 1
        return True, 0

    def remaining(self, client_id: str) -> int:
        bucket = self._windows.get(client_id)
        if bucket is None or self._clock() - bucket.started_at >= self.window:
            return self.limit
        return max(0, self.limit - bucket.count)

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, bucket in self._windows.items()
            if now - bucket.started_at >= self.window
        ]
        for key in expired:
            del self._windows[key]
