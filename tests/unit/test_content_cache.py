"""Tests for the content cache."""

import threading

import pytest

from mediadex.infrastructure.cache import CacheStats, ContentCache


def test_hit_requires_matching_modification_time():
    cache = ContentCache()
    assert cache.get("/a.jpg", 100.0) is None

    cache.put("/a.jpg", 100.0, b"a")

    assert cache.get("/a.jpg", 100.0) == b"a"
    assert cache.get("/a.jpg", 101.0) is None
    assert cache.stats.hits == 1
    assert cache.stats.misses == 2


def test_newer_put_supersedes():
    cache = ContentCache()
    cache.put("/a.jpg", 100.0, b"old")
    cache.put("/a.jpg", 200.0, b"new")

    assert len(cache) == 1
    assert cache.get("/a.jpg", 100.0) is None
    assert cache.get("/a.jpg", 200.0) == b"new"
    assert cache.stats.supersessions == 1


def test_older_put_is_ignored():
    cache = ContentCache()
    cache.put("/a.jpg", 200.0, b"new")
    cache.put("/a.jpg", 100.0, b"old")

    assert cache.modified_at("/a.jpg") == 200.0
    assert cache.get("/a.jpg", 200.0) == b"new"


def test_bounded_cache_evicts_least_recently_used():
    cache = ContentCache(max_entries=2)
    cache.put("/a", 1.0, b"a")
    cache.put("/b", 1.0, b"b")
    cache.get("/a", 1.0)
    cache.put("/c", 1.0, b"c")

    assert "/a" in cache
    assert "/b" not in cache
    assert "/c" in cache
    assert cache.stats.evictions == 1


def test_unbounded_by_default():
    cache = ContentCache()
    for i in range(500):
        cache.put(f"/{i}", 1.0, b"x")
    assert len(cache) == 500
    assert cache.max_entries is None


@pytest.mark.parametrize("bound", [0, -1])
def test_invalid_bound_rejected(bound):
    with pytest.raises(ValueError):
        ContentCache(max_entries=bound)


def test_invalidate_and_clear():
    cache = ContentCache()
    cache.put("/a", 1.0, b"aa")
    cache.put("/b", 1.0, b"bbb")
    assert cache.total_bytes() == 5

    assert cache.invalidate("/a") is True
    assert cache.invalidate("/a") is False

    cache.clear()
    assert len(cache) == 0
    assert cache.stats.stores == 0


def test_stats_is_a_copy():
    cache = ContentCache()
    stats = cache.stats
    cache.get("/a", 1.0)
    assert stats.misses == 0
    assert cache.stats.misses == 1


def test_hit_rate():
    stats = CacheStats(hits=3, misses=1)
    assert stats.hit_rate == 0.75
    assert CacheStats().hit_rate == 0.0


def test_concurrent_puts_and_gets():
    cache = ContentCache()

    def worker(offset):
        for i in range(200):
            path = f"/{offset}/{i}"
            cache.put(path, float(i), b"x")
            assert cache.get(path, float(i)) == b"x"

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(cache) == 8 * 200
    assert cache.stats.hits == 8 * 200
