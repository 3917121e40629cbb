# ABOUTME: Thread-safe rate limiting for Notion API calls.
# ABOUTME: Keeps one limiter per integration token shared across request threads.

import hashlib
import logging
import threading
import time
from collections import OrderedDict

logger = logging.getLogger(__name__)


class RateLimiter:
    """Spaces out Notion calls made with a single integration token.

    Every request thread using the same token goes through the same
    limiter, so the token's combined call rate stays under Notion's limit.
    """

    def __init__(self, calls_per_second: float = 2.5):
        """Initialize rate limiter.

        Args:
            calls_per_second: Maximum requests per second for one token.
                Default 2.5 stays below Notion's 3/sec limit.
        """
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self._min_interval = 1.0 / calls_per_second
        self._lock = threading.Lock()
        self._last_call = 0.0

    def acquire(self) -> None:
        """Block until this token may make another request."""
        with self._lock:
            now = time.monotonic()
            wait_time = self._last_call + self._min_interval - now
            if wait_time > 0:
                time.sleep(wait_time)
            self._last_call = time.monotonic()


class RateLimiterRegistry:
    """Hands out one RateLimiter per Notion token.

    Notion applies its rate limit per integration, so concurrent requests that
    share a token must share a limiter. Tokens are keyed by digest, and only
    the most recently used ``max_tokens`` limiters are kept.
    """

    def __init__(self, calls_per_second: float = 2.5, max_tokens: int = 1024):
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")
        self._calls_per_second = calls_per_second
        self._max_tokens = max_tokens
        self._lock = threading.Lock()
        self._limiters: OrderedDict[str, RateLimiter] = OrderedDict()

    def for_token(self, token: str) -> RateLimiter:
        key = hashlib.sha256(token.encode()).hexdigest()
        with self._lock:
            limiter = self._limiters.get(key)
            if limiter is not None:
                self._limiters.move_to_end(key)
                return limiter

            limiter = RateLimiter(self._calls_per_second)
            self._limiters[key] = limiter
            if len(self._limiters) > self._max_tokens:
                self._limiters.popitem(last=False)
                logger.debug(f"Evicted least recently used rate limiter ({self._max_tokens} tokens cached)")
            return limiter

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)
