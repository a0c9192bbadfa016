"""Tests for the query result cache.

Run with: pytest tests/test_query_cache.py -v
"""

import pytest

from services.query_cache import QueryCache, fingerprint


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestFingerprint:
    """Tests for cache key derivation."""

    def test_argument_order_does_not_matter(self):
        a = fingerprint("list_groups", "acme", page=1, sort="newest")
        b = fingerprint("list_groups", "acme", sort="newest", page=1)
        assert a == b

    def test_nested_key_order_does_not_matter(self):
        a = fingerprint("list_groups", "acme", filters={"x": 1, "y": None})
        b = fingerprint("list_groups", "acme", filters={"y": None, "x": 1})
        assert a == b

    def test_tenant_and_operation_are_part_of_key(self):
        base = fingerprint("list_groups", "acme", page=1)
        assert fingerprint("list_groups", "globex", page=1) != base
        assert fingerprint("get_stats", "acme", page=1) != base

    def test_is_sha256_hex(self):
        key = fingerprint("get_stats", "acme")
        assert len(key) == 64
        int(key, 16)


class TestQueryCache:
    """Tests for QueryCache."""

    def test_miss_then_hit(self):
        cache = QueryCache(ttl_seconds=60)
        assert cache.get("k") is None
        cache.put("k", "value")
        assert cache.get("k") == "value"
        assert cache.hits == 1
        assert cache.misses == 1

    def test_entries_expire(self):
        clock = FakeClock()
        cache = QueryCache(ttl_seconds=60, clock=clock)
        cache.put("k", "value")

        clock.now += 59
        assert cache.get("k") == "value"

        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_zero_ttl_disables(self):
        cache = QueryCache(ttl_seconds=0)
        cache.put("k", "value")
        assert not cache.enabled
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            QueryCache(ttl_seconds=-1)

    def test_oldest_entry_evicted(self):
        cache = QueryCache(ttl_seconds=60, max_entries=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_overwrite_refreshes_position(self):
        cache = QueryCache(ttl_seconds=60, max_entries=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)
        cache.put("c", 3)
        assert cache.get("a") == 10
        assert cache.get("b") is None

    def test_clear(self):
        cache = QueryCache(ttl_seconds=60)
        cache.put("a", 1)
        cache.clear()
        assert len(cache) == 0
        assert cache.get("a") is None
