"""Redis store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from polluted_cities.errors import StoreError
from polluted_cities.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def _translate_errors(command: str, key: str | None = None) -> Iterator[None]:
    """Re-raise Redis failures as StoreError."""
    try:
        yield
    except RedisError as e:
        logger.error("Redis command failed", command=command, key=key, error=str(e))
        raise StoreError(f"Redis {command} failed: {e}", {"key": key}) from e


class AsyncRedisStore:
    """Async Redis store.

    The client is created from ``url`` on first use and kept for the life of
    the process. Pass ``client`` to reuse an existing ``redis.asyncio.Redis``.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        client: Any = None,  # redis.asyncio.Redis
    ) -> None:
        self._url = url
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = redis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            logger.info("Redis client created")
        return self._client

    async def get(self, key: str) -> str | None:
        """Get a raw value by key."""
        with _translate_errors("GET", key):
            data = await self._get_client().get(key)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data

    async def set(self, key: str, value: str, ttl: float | None = None) -> None:
        """Store a raw value, expiring after ``ttl`` seconds if given."""
        with _translate_errors("SET", key):
            if ttl is None:
                await self._get_client().set(key, value)
            else:
                await self._get_client().set(key, value, px=max(1, int(ttl * 1000)))

    async def delete(self, key: str) -> None:
        """Delete a key."""
        with _translate_errors("DEL", key):
            await self._get_client().delete(key)

    async def incr(self, key: str) -> int:
        """Increment a counter and return its new value."""
        with _translate_errors("INCR", key):
            return int(await self._get_client().incr(key))

    async def ttl(self, key: str) -> int:
        """Get remaining seconds to live, or a TTL sentinel."""
        with _translate_errors("TTL", key):
            return int(await self._get_client().ttl(key))

    async def expire(self, key: str, ttl: float) -> bool:
        """Set the expiry of an existing key."""
        with _translate_errors("PEXPIRE", key):
            return bool(
                await self._get_client().pexpire(key, max(1, int(ttl * 1000)))
            )

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            with _translate_errors("QUIT"):
                await self._client.aclose()
            self._client = None
