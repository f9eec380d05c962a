"""Minimum-interval request gate shared by one crawl."""

from __future__ import annotations

import asyncio
import logging

from aiolimiter import AsyncLimiter

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Suspend callers until ``1 / requests_per_second`` has elapsed.

    A single gate per crawl, not per host: page fetches and link checks all
    pass through it. The gate is a leaky bucket holding one request, so
    ``wait(fraction)`` takes ``fraction`` of a slot and waits for that share
    of the interval after the previous request. The scheduler uses half
    slots to space out consecutive link checks. Requests are never dropped
    or reordered.
    """

    def __init__(self, requests_per_second: float) -> None:
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.requests_per_second = float(requests_per_second)
        self.interval = 1.0 / self.requests_per_second
        self._limiter = AsyncLimiter(max_rate=1, time_period=self.interval)

    async def wait(self, fraction: float = 1.0) -> float:
        """Block until the (scaled) interval has passed; return seconds waited.

        ``fraction`` must be in ``(0, 1]``.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        await self._limiter.acquire(fraction)
        waited = loop.time() - started
        if waited > 0.001:
            LOGGER.debug("rate limit: waited %.3fs", waited)
        return waited
