"""Tests for the caller-owned TTL cache.

Run with: python3 -m pytest tests/test_cache.py -v
"""

import pytest

from impactboard.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache:

    def test_get_set_and_expiry(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        assert cache.get("k") == "v"
        assert "k" in cache
        clock.now += 59
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_set_refreshes_expiry(self):
        clock = FakeClock()
        cache = TTLCache(10, clock=clock)
        cache.set("k", 1)
        clock.now += 8
        cache.set("k", 2)
        clock.now += 8
        assert cache.get("k") == 2

    def test_evict_and_clear(self):
        cache = TTLCache(10, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.evict("a") is True
        assert cache.evict("a") is False
        cache.clear()
        assert len(cache) == 0

    def test_purge_expired(self):
        clock = FakeClock()
        cache = TTLCache(10, clock=clock)
        cache.set("old", 1)
        clock.now += 5
        cache.set("new", 2)
        clock.now += 6
        assert cache.purge_expired() == 1
        assert "new" in cache
        assert "old" not in cache

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            TTLCache(0)
