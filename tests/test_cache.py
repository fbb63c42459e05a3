# =============================================================================
# tests/test_cache.py - TTL Cache Tests
# =============================================================================

import pytest

from lib.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestFixedExpiry:
    """Entries expire a fixed time after they were stored."""

    def test_live_entry(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.advance(9)
        assert cache.get("k") == "v"
        assert "k" in cache

    def test_expired_entry(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.advance(10)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_reads_do_not_extend(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.advance(6)
        cache.get("k")
        clock.advance(6)
        assert cache.get("k") is None

    def test_set_replaces(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "old")
        clock.advance(8)
        cache.set("k", "new")
        clock.advance(8)
        assert cache.get("k") == "new"


class TestSlidingExpiry:
    """Every successful read restarts the entry's lifetime."""

    def test_reads_extend(self, clock):
        cache = TTLCache(ttl_seconds=10, sliding=True, clock=clock)
        cache.set("k", "v")

        for _ in range(5):
            clock.advance(6)
            assert cache.get("k") == "v"

    def test_idle_entry_expires(self, clock):
        cache = TTLCache(ttl_seconds=10, sliding=True, clock=clock)
        cache.set("k", "v")

        clock.advance(11)
        assert cache.get("k") is None


def test_purge_expired(clock):
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("old", 1)
    clock.advance(5)
    cache.set("new", 2)
    clock.advance(6)

    assert cache.purge_expired() == ["old"]
    assert len(cache) == 1
    assert cache.get("new") == 2


def test_delete(clock):
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("k", "v")
    cache.delete("k")
    cache.delete("missing")
    assert cache.get("k") is None
