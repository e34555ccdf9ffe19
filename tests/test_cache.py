"""
Unit tests for EffectCache.

Covers:
1. get/set/has/delete/clear round trips
2. TTL expiry with an injected clock (lazy, on access)
3. LRU eviction under capacity pressure
4. get_or_compute and stats
"""

import pytest

from core.config import CacheConfig
from engine.cache import EffectCache


@pytest.fixture
def cache(clock):
    return EffectCache(max_entries=3, default_ttl=60.0, clock=clock)


class TestRoundTrip:

    def test_set_then_get(self, cache):
        cache.set("k", {"v": 1}, ttl=30)
        assert cache.get("k") == {"v": 1}
        assert cache.has("k")
        assert "k" in cache

    def test_missing_key(self, cache):
        assert cache.get("nope") is None
        assert not cache.has("nope")

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert len(cache) == 0

    def test_overwrite_replaces_value(self, cache):
        cache.set("a", 1)
        cache.set("a", 2)
        assert cache.get("a") == 2
        assert len(cache) == 1

    def test_non_string_key_rejected(self, cache):
        with pytest.raises(TypeError):
            cache.set(("tuple", "key"), 1)


class TestExpiry:

    def test_expires_after_ttl(self, cache, clock):
        cache.set("k", "v", ttl=10)
        clock.advance(10)
        assert cache.get("k") == "v"  # not past ttl yet
        clock.advance(0.5)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl(self, cache, clock):
        cache.set("k", "v")
        clock.advance(61)
        assert not cache.has("k")

    def test_sweep_expired(self, cache, clock):
        cache.set("short", 1, ttl=5)
        cache.set("long", 2, ttl=500)
        clock.advance(6)
        assert cache.sweep_expired() == 1
        assert len(cache) == 1
        assert cache.get("long") == 2


class TestEviction:

    def test_least_recently_used_goes_first(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.get("a")          # a is now most recent
        cache.set("d", 4)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert cache.get("d") == 4
        assert cache.stats["evictions"] == 1

    def test_expired_entries_make_room_first(self, cache, clock):
        cache.set("old", 1, ttl=1)
        cache.set("b", 2)
        cache.set("c", 3)
        clock.advance(2)
        cache.set("d", 4)
        assert cache.stats["evictions"] == 0
        assert cache.get("b") == 2

    def test_never_exceeds_capacity(self, cache):
        for i in range(20):
            cache.set(f"k{i}", i)
        assert len(cache) == 3


class TestHelpers:

    def test_get_or_compute_calls_factory_once(self, cache):
        calls = []

        def factory():
            calls.append(1)
            return 42

        assert cache.get_or_compute("x", factory) == 42
        assert cache.get_or_compute("x", factory) == 42
        assert len(calls) == 1

    def test_stats_count_hits_and_misses(self, cache):
        cache.get("missing")
        cache.set("k", 1)
        cache.get("k")
        assert cache.stats["hits"] == 1
        assert cache.stats["misses"] == 1

    def test_from_config(self):
        cache = EffectCache.from_config(CacheConfig(max_entries=5, default_ttl_seconds=1.5))
        assert cache.max_entries == 5
        assert cache.default_ttl == 1.5

    @pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"default_ttl": -1}])
    def test_bad_arguments(self, kwargs):
        with pytest.raises(ValueError):
            EffectCache(**kwargs)
