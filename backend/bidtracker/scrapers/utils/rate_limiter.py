"""Sliding-window rate limiter for per-adapter rate limiting."""

import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict

import structlog

from bidtracker.scrapers.base import RateLimit


logger = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class SlidingWindow:
    """Sliding-window log of request timestamps.

    At most ``max_requests`` timestamps may fall inside any span of
    ``time_window`` seconds. When the window is full, acquire() waits until
    the oldest timestamp leaves it. Old timestamps are pruned lazily on
    each acquire.
    """

    def __init__(
        self,
        max_requests: int,
        time_window: float,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize the window.

        Args:
            max_requests: Requests allowed per window
            time_window: Window length in seconds
            clock: Monotonic time source
            sleep: Coroutine used to wait
        """
        self.max_requests = max_requests
        self.time_window = time_window
        self._clock = clock
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        """Drop timestamps that have left the window."""
        while self._timestamps and now - self._timestamps[0] >= self.time_window:
            self._timestamps.popleft()

    def in_window(self) -> int:
        """Return how many requests currently count against the window."""
        self._prune(self._clock())
        return len(self._timestamps)

    async def acquire(self) -> float:
        """Take a slot in the window, waiting if necessary.

        Callers are served in arrival order; the lock keeps concurrent
        callers from overrunning the ceiling.

        Returns:
            Seconds spent waiting
        """
        waited = 0.0
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)
                if len(self._timestamps) < self.max_requests:
                    self._timestamps.append(now)
                    return waited
                wait_time = self._timestamps[0] + self.time_window - now
                await self._sleep(wait_time)
                waited += wait_time


class AdapterRateLimiter:
    """Per-adapter rate limiter.

    Each adapter slug gets its own SlidingWindow sized from the adapter's
    RateLimit, so a slow source never throttles another.
    """

    def __init__(self, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep):
        """Initialize rate limiter with an empty window table."""
        self._clock = clock
        self._sleep = sleep
        self._windows: Dict[str, SlidingWindow] = {}

    def _get_window(self, key: str, limit: RateLimit) -> SlidingWindow:
        """Get or create the window for an adapter."""
        if key not in self._windows:
            self._windows[key] = SlidingWindow(
                max_requests=limit.max_requests,
                time_window=limit.time_window,
                clock=self._clock,
                sleep=self._sleep,
            )
        return self._windows[key]

    async def acquire(self, key: str, limit: RateLimit) -> None:
        """Acquire a request slot for an adapter.

        This method will block until the rate limit allows the request.

        Args:
            key: Adapter slug
            limit: The adapter's request ceiling
        """
        window = self._get_window(key, limit)
        waited = await window.acquire()
        if waited > 0:
            logger.info("rate_limit_wait", adapter=key, waited_seconds=round(waited, 3))

    def requests_in_window(self, key: str) -> int:
        """Return how many requests an adapter has made in its current window."""
        window = self._windows.get(key)
        return window.in_window() if window else 0
