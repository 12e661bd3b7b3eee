"""Test the in-memory LRU lyrics cache."""

import pytest

from lyricsync.exceptions import ValidationError
from lyricsync.utils.cache import LyricsCache


class TestLyricsCache:
    """Test LRU cache behavior."""

    def test_get_missing_is_a_miss(self):
        cache = LyricsCache(2)
        assert cache.get("nope") is None
        assert cache.stats()["misses"] == 1

    def test_put_and_get(self):
        cache = LyricsCache(2)
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_evicts_least_recently_used(self):
        cache = LyricsCache(2)
        cache.put("A", 1)
        cache.put("B", 2)
        cache.get("A")
        cache.put("C", 3)
        assert "B" not in cache
        assert cache.keys() == ["A", "C"]
        assert cache.stats()["evictions"] == 1

    def test_put_existing_refreshes_recency(self):
        cache = LyricsCache(2)
        cache.put("A", 1)
        cache.put("B", 2)
        cache.put("A", 10)
        cache.put("C", 3)
        assert cache.keys() == ["A", "C"]
        assert cache.get("A") == 10

    def test_size_never_exceeds_capacity(self):
        cache = LyricsCache(3)
        for i in range(10):
            cache.put(i, i)
            assert len(cache) <= 3
        assert cache.keys() == [7, 8, 9]

    def test_contains_does_not_touch_recency(self):
        cache = LyricsCache(2)
        cache.put("A", 1)
        cache.put("B", 2)
        assert "A" in cache
        cache.put("C", 3)
        assert "A" not in cache

    def test_delete_and_clear(self):
        cache = LyricsCache(2)
        cache.put("A", None)
        assert cache.delete("A") is True
        assert cache.delete("A") is False
        cache.put("B", 2)
        cache.clear()
        assert len(cache) == 0

    def test_stats(self):
        cache = LyricsCache(5)
        cache.put("A", 1)
        cache.get("A")
        cache.get("B")
        assert cache.stats() == {
            "size": 1,
            "capacity": 5,
            "hits": 1,
            "misses": 1,
            "evictions": 0,
        }

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValidationError):
            LyricsCache(capacity)
