"""In-memory store (async only)."""

import asyncio
import math
import time
from collections.abc import Callable

from polluted_cities.adapters.base import TTL_MISSING, TTL_NO_EXPIRY
from polluted_cities.errors import StoreError


class AsyncMemoryStore:
    """Async in-process store with lazy expiry.

    Only coordinates callers inside one process. ``clock`` returns seconds
    and can be swapped for a fake in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._data: dict[str, str] = {}
        self._expires: dict[str, float] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    def _purge(self, key: str) -> None:
        expires_at = self._expires.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            self._data.pop(key, None)
            self._expires.pop(key, None)

    async def get(self, key: str) -> str | None:
        """Get a raw value by key."""
        async with self._lock:
            self._purge(key)
            return self._data.get(key)

    async def set(self, key: str, value: str, ttl: float | None = None) -> None:
        """Store a raw value, expiring after ``ttl`` seconds if given."""
        async with self._lock:
            self._data[key] = value
            if ttl is None:
                self._expires.pop(key, None)
            else:
                self._expires[key] = self._clock() + ttl

    async def delete(self, key: str) -> None:
        """Delete a key."""
        async with self._lock:
            self._data.pop(key, None)
            self._expires.pop(key, None)

    async def incr(self, key: str) -> int:
        """Increment a counter and return its new value."""
        async with self._lock:
            self._purge(key)
            current = self._data.get(key, "0")
            try:
                value = int(current) + 1
            except ValueError:
                raise StoreError(
                    "value is not an integer", {"key": key}
                ) from None
            # Like Redis INCR, an existing expiry is kept
            self._data[key] = str(value)
            return value

    async def ttl(self, key: str) -> int:
        """Get remaining seconds to live, or a TTL sentinel."""
        async with self._lock:
            self._purge(key)
            if key not in self._data:
                return TTL_MISSING
            expires_at = self._expires.get(key)
            if expires_at is None:
                return TTL_NO_EXPIRY
            return math.ceil(expires_at - self._clock())

    async def expire(self, key: str, ttl: float) -> bool:
        """Set the expiry of an existing key."""
        async with self._lock:
            self._purge(key)
            if key not in self._data:
                return False
            self._expires[key] = self._clock() + ttl
            return True

    async def disconnect(self) -> None:
        """Disconnect from the storage backend (no-op for memory)."""
        pass
