"""Tests for the fixed-window rate limiter."""

import asyncio

import pytest

from polluted_cities import Cache, FixedWindowRateLimiter, RateLimitTimeout


@pytest.fixture
def limiter(cache: Cache, clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        cache, key="rl:test", window=10, max_requests=5, padding=0.1, sleep=clock.sleep
    )


class TestAcquire:
    """Tests for admission."""

    async def test_first_admission_opens_window(
        self, limiter: FixedWindowRateLimiter, cache: Cache
    ) -> None:
        await limiter.acquire()
        assert await cache.get_time_to_live("rl:test") == 10

    async def test_admits_up_to_limit_without_waiting(
        self, limiter: FixedWindowRateLimiter, clock
    ) -> None:
        for _ in range(5):
            await limiter.acquire()
        assert clock.sleeps == []

    async def test_waits_for_window_to_reset(
        self, limiter: FixedWindowRateLimiter, clock, cache: Cache
    ) -> None:
        for _ in range(5):
            await limiter.acquire()
        await limiter.acquire()

        assert clock.sleeps == [10.1]
        # The sixth admission opened a fresh window
        assert await cache.get("rl:test") == 1

    async def test_waits_at_least_one_second(
        self, limiter: FixedWindowRateLimiter, clock
    ) -> None:
        for _ in range(5):
            await limiter.acquire()
        clock.now = 9.8
        await limiter.acquire()
        assert clock.sleeps == [1.1]

    async def test_repairs_window_without_expiry(
        self, limiter: FixedWindowRateLimiter, cache: Cache, clock
    ) -> None:
        await cache.set("rl:test", 5)
        await limiter.acquire()
        assert clock.sleeps == [10.1]


class TestConcurrency:
    """Concurrent callers share one window."""

    async def test_never_exceeds_limit_within_window(self, cache: Cache, clock) -> None:
        limiter = FixedWindowRateLimiter(
            cache, key="rl:test", window=10, max_requests=5, sleep=clock.sleep
        )
        granted: list[float] = []

        async def caller() -> None:
            await limiter.acquire()
            granted.append(clock.now)

        await asyncio.gather(*(caller() for _ in range(12)))

        assert len(granted) == 12
        assert len([t for t in granted if t < 10]) == 5
        # No window of length 10 starting at a grant holds more than 5
        for start in granted:
            assert len([t for t in granted if start <= t < start + 10]) <= 5

    async def test_instances_share_one_counter(self, cache: Cache, clock) -> None:
        first = FixedWindowRateLimiter(
            cache, key="rl:test", window=10, max_requests=2, sleep=clock.sleep
        )
        second = FixedWindowRateLimiter(
            cache, key="rl:test", window=10, max_requests=2, sleep=clock.sleep
        )
        await first.acquire()
        await second.acquire()
        await first.acquire()
        assert len(clock.sleeps) == 1


class TestWaitCeiling:
    """Tests for the wait budget."""

    async def test_raises_when_wait_exceeds_ceiling(self, cache: Cache, clock) -> None:
        limiter = FixedWindowRateLimiter(
            cache,
            key="rl:test",
            window=10,
            max_requests=1,
            max_wait=5,
            sleep=clock.sleep,
        )
        await limiter.acquire()
        with pytest.raises(RateLimitTimeout):
            await limiter.acquire()
        assert clock.sleeps == []

    async def test_unbounded_wait(self, cache: Cache, clock) -> None:
        limiter = FixedWindowRateLimiter(
            cache,
            key="rl:test",
            window=10,
            max_requests=1,
            max_wait=None,
            sleep=clock.sleep,
        )
        await limiter.acquire()
        await limiter.acquire()
        assert clock.sleeps == [10.1]

    def test_rejects_invalid_limits(self, cache: Cache) -> None:
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(cache, max_requests=0)
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(cache, window=0)
