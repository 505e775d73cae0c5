# ABOUTME: Thread-safe rate limiting for Notion API calls.
# ABOUTME: Provides RateLimiter, shared by the page and block fetch threads.

import threading
import time


class RateLimiter:
    """Thread-safe rate limiter using simple timing.

    Blocks callers until enough time has passed since the previous request.
    A rate of zero or less disables throttling.
    """

    def __init__(self, calls_per_second: float = 2.5):
        """Initialize rate limiter.

        Args:
            calls_per_second: Maximum requests per second. Default 2.5 leaves
                headroom below Notion's 3/sec limit.
        """
        self._min_interval = 1.0 / calls_per_second if calls_per_second > 0 else 0.0
        self._lock = threading.Lock()
        self._last_call = 0.0

    @property
    def min_interval(self) -> float:
        return self._min_interval

    def acquire(self) -> None:
        """Block until a request slot is available."""
        if not self._min_interval:
            return
        with self._lock:
            now = time.monotonic()
            wait_time = self._last_call + self._min_interval - now
            if wait_time > 0:
                time.sleep(wait_time)
            self._last_call = time.monotonic()
