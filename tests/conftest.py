"""Shared pytest fixtures."""

import asyncio

import httpx
import respx
import pytest

from polluted_cities import AsyncMemoryStore, Cache

POLLUTED_URL = "https://polluted.test"
CITIES_URL = "https://cities.test"
WIKI_URL = "https://wiki.test/api/rest_v1"


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class CountingStore(AsyncMemoryStore):
    """Memory store that records counter increments."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock=clock)
        self.incr_calls = 0

    async def incr(self, key: str) -> int:
        self.incr_calls += 1
        return await super().incr(key)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CountingStore:
    """Create a fresh in-memory store on the fake clock for each test."""
    return CountingStore(clock)


@pytest.fixture
def cache(store: CountingStore) -> Cache:
    return Cache(store)


@pytest.fixture
async def polluted_http():
    async with httpx.AsyncClient(base_url=POLLUTED_URL) as client:
        yield client


@pytest.fixture
async def cities_http():
    async with httpx.AsyncClient(base_url=CITIES_URL) as client:
        yield client


@pytest.fixture
async def wiki_http():
    async with httpx.AsyncClient(base_url=WIKI_URL) as client:
        yield client


@pytest.fixture
def api():
    """Mock every upstream; routes use absolute URLs."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock
