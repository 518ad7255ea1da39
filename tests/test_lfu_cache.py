import pytest

from swrcache._lfu_cache import LFUCache


def test_lfu_cache():
    cache: LFUCache[str, bytes] = LFUCache(2)

    cache.put("a", b"1")

    assert cache.get("a") == b"1"
    assert "a" in cache
    assert len(cache) == 1


def test_lfu_cache_invalid_capacity():
    with pytest.raises(ValueError, match="Capacity must be positive"):
        LFUCache(0)


def test_lfu_cache_missing_key():
    cache: LFUCache[str, bytes] = LFUCache(2)

    with pytest.raises(KeyError):
        cache.get("missing")


def test_lfu_cache_evicts_least_frequently_used():
    cache: LFUCache[int, int] = LFUCache(2)

    cache.put(1, 10)
    cache.put(2, 20)
    cache.get(1)
    cache.put(3, 30)

    assert 2 not in cache
    assert cache.get(1) == 10
    assert cache.get(3) == 30
    assert len(cache) == 2


def test_lfu_cache_ties_evict_oldest():
    cache: LFUCache[int, int] = LFUCache(2)

    cache.put(1, 10)
    cache.put(2, 20)
    cache.put(3, 30)

    assert 1 not in cache
    assert 2 in cache
    assert 3 in cache


def test_lfu_cache_put_existing_replaces_value():
    cache: LFUCache[int, int] = LFUCache(2)

    cache.put(1, 10)
    cache.put(2, 20)
    cache.put(1, 11)
    cache.put(3, 30)

    assert cache.get(1) == 11
    assert 2 not in cache
    assert len(cache) == 2


def test_lfu_cache_min_freq_follows_bumped_key():
    cache: LFUCache[int, int] = LFUCache(1)

    cache.put(1, 10)
    cache.get(1)
    cache.get(1)
    cache.put(2, 20)

    assert 1 not in cache
    assert cache.get(2) == 20
