"""Fixed-window rate limiter coordinated through the shared store."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable

from polluted_cities.cache import TTL_NO_EXPIRY, Cache
from polluted_cities.errors import RateLimitTimeout
from polluted_cities.logging import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class FixedWindowRateLimiter:
    """At most ``max_requests`` admissions per ``window`` seconds.

    Every process instance using the same store and ``key`` shares one
    counter. The counter is incremented before it is checked, so two callers
    can never both take the last slot. Bursts across a window boundary are
    allowed.
    """

    def __init__(
        self,
        cache: Cache,
        *,
        key: str = "rl:polluted_api",
        window: float = 10,
        max_requests: int = 5,
        padding: float = 0.1,
        max_wait: float | None = 120,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self._cache = cache
        self._key = key
        self._window = window
        self._max_requests = max_requests
        self._padding = padding
        self._max_wait = max_wait
        self._sleep = sleep

    @property
    def key(self) -> str:
        return self._key

    @property
    def window(self) -> float:
        return self._window

    @property
    def max_requests(self) -> int:
        return self._max_requests

    async def acquire(self) -> None:
        """Wait until one admission is granted.

        Raises RateLimitTimeout once the total wait would exceed ``max_wait``.
        """
        waited = 0.0
        while True:
            count = await self._cache.increment(self._key)
            if count == 1:
                # First admission opens the window
                await self._cache.add_time_to_live(self._key, self._window)
            if count <= self._max_requests:
                logger.debug("Rate limit admission", key=self._key, count=count)
                return

            remaining = await self._cache.get_time_to_live(self._key)
            if remaining == TTL_NO_EXPIRY:
                # Window opener died between INCR and EXPIRE
                await self._cache.add_time_to_live(self._key, self._window)
                remaining = math.ceil(self._window)
            delay = max(1, remaining) + self._padding
            if self._max_wait is not None and waited + delay > self._max_wait:
                logger.error(
                    "Rate limit wait ceiling reached",
                    key=self._key,
                    waited=waited,
                    max_wait=self._max_wait,
                )
                raise RateLimitTimeout(
                    f"No rate-limit admission within {self._max_wait}s",
                    {"key": self._key, "waited": waited},
                )
            logger.warning(
                "Rate limit window full, waiting",
                key=self._key,
                count=count,
                delay=delay,
            )
            await self._sleep(delay)
            waited += delay
