"""
In-memory fixed-window rate limiter.

Each client address may send RATE_LIMIT_MAX_REQUESTS requests per
RATE_LIMIT_WINDOW_MINUTES window. Counters live in process memory, so the
limit is per instance.
"""

import math
import time
from functools import lru_cache
from typing import Callable, Dict, Tuple

from lavashow_chat.config import settings


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows starting at the key's first request."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> Tuple[bool, int]:
        """
        Record one request.

        Returns:
            (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        now = self._clock()
        window_start, count = self._windows.get(key, (now, 0))

        if now - window_start >= self.window_seconds:
            window_start, count = now, 0

        if count >= self.max_requests:
            retry_after = math.ceil(self.window_seconds - (now - window_start))
            return False, max(retry_after, 1)

        self._windows[key] = (window_start, count + 1)
        return True, 0

    def sweep(self) -> int:
        """Forget keys whose window has ended."""
        now = self._clock()
        expired = [
            key for key, (window_start, _) in self._windows.items()
            if now - window_start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def reset(self) -> None:
        self._windows.clear()


@lru_cache(maxsize=1)
def get_rate_limiter() -> FixedWindowRateLimiter:
    """Process-wide limiter configured from settings."""
    return FixedWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_MINUTES * 60,
    )
