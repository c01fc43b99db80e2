"""Tests for the in-memory store."""

import pytest

from polluted_cities import TTL_MISSING, TTL_NO_EXPIRY, AsyncMemoryStore, StoreError


class TestAsyncMemoryStore:
    """Tests for AsyncMemoryStore."""

    async def test_get_nonexistent_returns_none(self, store: AsyncMemoryStore) -> None:
        assert await store.get("nonexistent") is None

    async def test_set_and_get(self, store: AsyncMemoryStore) -> None:
        await store.set("key1", "value")
        assert await store.get("key1") == "value"

    async def test_entry_expires(self, store: AsyncMemoryStore, clock) -> None:
        await store.set("key1", "value", 5)
        clock.now = 4.9
        assert await store.get("key1") == "value"
        clock.now = 5.0
        assert await store.get("key1") is None

    async def test_set_without_ttl_clears_expiry(
        self, store: AsyncMemoryStore, clock
    ) -> None:
        await store.set("key1", "old", 5)
        await store.set("key1", "new")
        clock.now = 100
        assert await store.get("key1") == "new"

    async def test_delete(self, store: AsyncMemoryStore) -> None:
        await store.set("key1", "value")
        await store.delete("key1")
        assert await store.get("key1") is None

    async def test_incr_creates_and_counts(self, store: AsyncMemoryStore) -> None:
        assert await store.incr("counter") == 1
        assert await store.incr("counter") == 2
        assert await store.ttl("counter") == TTL_NO_EXPIRY

    async def test_incr_keeps_expiry(self, store: AsyncMemoryStore, clock) -> None:
        await store.incr("counter")
        await store.expire("counter", 10)
        await store.incr("counter")
        clock.now = 10
        assert await store.get("counter") is None

    async def test_incr_rejects_non_integer(self, store: AsyncMemoryStore) -> None:
        await store.set("key1", "not a number")
        with pytest.raises(StoreError):
            await store.incr("key1")

    async def test_ttl_sentinels_and_rounding(
        self, store: AsyncMemoryStore, clock
    ) -> None:
        assert await store.ttl("missing") == TTL_MISSING
        await store.set("key1", "value", 10)
        clock.now = 0.5
        assert await store.ttl("key1") == 10

    async def test_expire_missing_key_returns_false(
        self, store: AsyncMemoryStore
    ) -> None:
        assert await store.expire("missing", 10) is False
        assert await store.get("missing") is None
