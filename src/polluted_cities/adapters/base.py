"""Base protocol for shared cache stores."""

from typing import Protocol, runtime_checkable

# TTL sentinels, as reported by Redis TTL
TTL_NO_EXPIRY = -1
TTL_MISSING = -2


@runtime_checkable
class AsyncStore(Protocol):
    """Async key-value store shared by every process instance.

    Values are UTF-8 text. Every mutation must be atomic at the store.
    """

    async def get(self, key: str) -> str | None:
        """Get a value by key, or None if missing or expired."""
        ...

    async def set(self, key: str, value: str, ttl: float | None = None) -> None:
        """Store a value, expiring after ``ttl`` seconds if given."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a key."""
        ...

    async def incr(self, key: str) -> int:
        """Atomically increment an integer counter, creating it at 1."""
        ...

    async def ttl(self, key: str) -> int:
        """Remaining whole seconds, TTL_NO_EXPIRY or TTL_MISSING."""
        ...

    async def expire(self, key: str, ttl: float) -> bool:
        """Set the expiry of an existing key. False if the key is absent."""
        ...

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        ...
