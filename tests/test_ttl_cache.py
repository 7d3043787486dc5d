"""Tests for the in-process TTL cache."""

import pytest

from core.ttl_cache import TTLCache


class FakeTime:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now


def test_value_returned_before_expiry():
    t = FakeTime()
    cache = TTLCache(60, clock=t)
    cache.set("search:pasta:", {"results": [1]})
    t.now += 59
    assert cache.get("search:pasta:") == {"results": [1]}


def test_value_still_valid_at_exact_expiry():
    t = FakeTime()
    cache = TTLCache(60, clock=t)
    cache.set("k", "v")
    t.now += 60
    assert cache.get("k") == "v"


def test_expired_value_is_a_miss_and_removed():
    t = FakeTime()
    cache = TTLCache(60, clock=t)
    cache.set("k", "v")
    t.now += 60.001
    assert cache.get("k") is None
    assert len(cache) == 0


def test_per_entry_ttl_overrides_default():
    t = FakeTime()
    cache = TTLCache(3600, clock=t)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2)
    t.now += 10
    assert "short" not in cache
    assert "long" in cache


def test_purge_expired_and_clear():
    t = FakeTime()
    cache = TTLCache(10, clock=t)
    cache.set("a", 1)
    cache.set("b", 2, ttl=100)
    t.now += 11
    assert cache.purge_expired() == 1
    assert len(cache) == 1
    assert cache.clear() == 1
    assert cache.get("b") is None


def test_delete():
    cache = TTLCache(10)
    cache.set("a", 1)
    assert cache.delete("a") is True
    assert cache.delete("a") is False


def test_invalid_ttl_rejected():
    with pytest.raises(ValueError):
        TTLCache(0)
