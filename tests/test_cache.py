"""Tests for the JSON-aware cache."""

import math

import pytest

from polluted_cities import TTL_MISSING, TTL_NO_EXPIRY, Cache, StoreError


class FailingStore:
    """Store whose every command fails like an unreachable Redis."""

    async def get(self, key):
        raise StoreError("connection refused")

    async def set(self, key, value, ttl=None):
        raise StoreError("connection refused")

    async def incr(self, key):
        raise StoreError("connection refused")


class TestGetSet:
    """Tests for value get/set."""

    async def test_missing_key_returns_none(self, cache: Cache) -> None:
        assert await cache.get("nothing") is None

    async def test_json_values_round_trip(self, cache: Cache) -> None:
        body = {"results": [{"name": "Berlin", "pollutionValue": 42}], "meta": {}}
        await cache.set("polluted:cities:DE:1:2", body, 30)
        assert await cache.get("polluted:cities:DE:1:2") == body

        await cache.set("cities:germany", ["Berlin", "Munich"])
        assert await cache.get("cities:germany") == ["Berlin", "Munich"]

    async def test_strings_stored_verbatim(self, cache: Cache, store) -> None:
        await cache.set("wiki:desc:Berlin", "Capital of Germany.")
        assert await store.get("wiki:desc:Berlin") == "Capital of Germany."
        assert await cache.get("wiki:desc:Berlin") == "Capital of Germany."

    async def test_empty_string_is_a_value(self, cache: Cache) -> None:
        await cache.set("wiki:desc:Nowhere", "", 60)
        assert await cache.get("wiki:desc:Nowhere") == ""

    async def test_value_expires_after_ttl(self, cache: Cache, clock) -> None:
        await cache.set("key", {"a": 1}, 30)
        clock.now = 29
        assert await cache.get("key") == {"a": 1}
        clock.now = 30
        assert await cache.get("key") is None

    async def test_zero_ttl_is_already_expired(self, cache: Cache) -> None:
        await cache.set("key", "old")
        await cache.set("key", "new", 0)
        assert await cache.get("key") is None

    @pytest.mark.parametrize("ttl", [None, -1, math.inf, math.nan])
    async def test_non_finite_or_negative_ttl_persists(
        self, cache: Cache, clock, ttl
    ) -> None:
        await cache.set("key", "value", ttl)
        clock.now = 10**9
        assert await cache.get("key") == "value"
        assert await cache.get_time_to_live("key") == TTL_NO_EXPIRY


class TestCounters:
    """Tests for counter primitives."""

    async def test_increment_starts_at_one_without_expiry(self, cache: Cache) -> None:
        assert await cache.increment("rl:test") == 1
        assert await cache.increment("rl:test") == 2
        assert await cache.get_time_to_live("rl:test") == TTL_NO_EXPIRY

    async def test_add_time_to_live(self, cache: Cache, clock) -> None:
        await cache.increment("rl:test")
        assert await cache.add_time_to_live("rl:test", 10) is True
        assert await cache.get_time_to_live("rl:test") == 10
        clock.now = 10
        assert await cache.get_time_to_live("rl:test") == TTL_MISSING

    async def test_add_time_to_live_on_missing_key_is_noop(self, cache: Cache) -> None:
        assert await cache.add_time_to_live("missing", 10) is False
        assert await cache.get_time_to_live("missing") == TTL_MISSING


class TestStoreFailures:
    """Store errors propagate unchanged."""

    async def test_get_propagates_store_error(self) -> None:
        with pytest.raises(StoreError):
            await Cache(FailingStore()).get("key")

    async def test_increment_propagates_store_error(self) -> None:
        with pytest.raises(StoreError):
            await Cache(FailingStore()).increment("rl:test")
