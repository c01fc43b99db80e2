"""JSON-aware cache over a shared store.

Values go through JSON; counters do not. ``get``/``set`` handle cached
values, while ``increment``, ``get_time_to_live`` and ``add_time_to_live``
work on raw counters such as the rate-limit window.
"""

from __future__ import annotations

import json
import math
from typing import Any

from polluted_cities.adapters.base import TTL_MISSING, TTL_NO_EXPIRY, AsyncStore
from polluted_cities.logging import get_logger

logger = get_logger(__name__)


def _encode(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _decode(data: str) -> Any:
    try:
        return json.loads(data)
    except ValueError:
        return data


class Cache:
    """Cache abstraction shared by every upstream client.

    Store failures propagate as StoreError. A missing key is never an error.
    """

    def __init__(self, store: AsyncStore) -> None:
        self._store = store

    @property
    def store(self) -> AsyncStore:
        return self._store

    async def get(self, key: str) -> Any | None:
        """Get a value, JSON-decoded when it parses, else the raw text."""
        data = await self._store.get(key)
        if data is None:
            logger.debug("Cache miss", key=key)
            return None
        logger.debug("Cache hit", key=key)
        return _decode(data)

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value.

        A finite, non-negative ``ttl`` expires the entry after that many
        seconds (0 means already expired). Anything else persists.
        """
        payload = _encode(value)
        if ttl is None or not math.isfinite(ttl) or ttl < 0:
            await self._store.set(key, payload)
        elif ttl == 0:
            await self._store.delete(key)
        else:
            await self._store.set(key, payload, ttl)

    async def increment(self, key: str) -> int:
        """Atomically add 1 to a counter. New counters start at 1, no expiry."""
        return await self._store.incr(key)

    async def get_time_to_live(self, key: str) -> int:
        """Remaining seconds, TTL_NO_EXPIRY (-1) or TTL_MISSING (-2)."""
        return await self._store.ttl(key)

    async def add_time_to_live(self, key: str, ttl: float) -> bool:
        """Set or overwrite the expiry of an existing key.

        Returns False and changes nothing if the key is absent.
        """
        return await self._store.expire(key, ttl)

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        await self._store.disconnect()


__all__ = ["TTL_MISSING", "TTL_NO_EXPIRY", "Cache"]
