"""Shared cache stores (async only)."""

from polluted_cities.adapters.base import TTL_MISSING, TTL_NO_EXPIRY, AsyncStore
from polluted_cities.adapters.memory import AsyncMemoryStore
from polluted_cities.adapters.redis import AsyncRedisStore

__all__ = [
    "TTL_MISSING",
    "TTL_NO_EXPIRY",
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "AsyncStore",
]
