import random
import time

import pytest

from lfu_ttl.cache.lfu_ttl_cache import LFUTTLCache
from lfu_ttl.config import CONFIG


def assert_consistent(cache):
    """Every stored key sits in exactly one bucket and no non-head bucket is empty."""
    snapshot = cache.frequencies()
    bucketed = [key for keys in snapshot.values() for key in keys]
    assert sorted(bucketed, key=repr) == sorted(cache._entries, key=repr)
    assert len(bucketed) == len(set(bucketed))
    for frequency, keys in snapshot.items():
        if frequency != 1:
            assert keys
    assert list(snapshot) == sorted(snapshot)


def test_defaults():
    cache = LFUTTLCache()
    assert cache.max_entries == 1024
    assert cache.invalidation_timeout == 30.0
    assert cache.eager_purge is True
    assert len(cache) == 0


@pytest.mark.parametrize("max_entries", [0, -1, 2.5, True, "10"])
def test_invalid_capacity_fails_fast(max_entries):
    with pytest.raises(ValueError):
        LFUTTLCache(max_entries=max_entries)


def test_zero_timeout_expires_every_entry(make_cache):
    cache = make_cache(invalidation_timeout=0)
    cache.put("a", 1)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_insert_and_retrieve(make_cache):
    cache = make_cache(max_entries=10)
    for i in range(10):
        assert cache.put(i, i * i) is None
    for i in range(10):
        assert cache.get(i) == i * i


def test_size_is_bounded(make_cache):
    cache = make_cache(max_entries=10)
    for i in range(11):
        cache.put(i, i * i)
        assert cache.size() <= 10
    assert cache.size() == 10
    assert 0 not in cache


def test_evicts_least_frequent(make_cache):
    cache = make_cache(max_entries=17)
    for i in range(17):
        cache.put(i, i * i)
    for i in range(12):
        cache.get(i)
    for i in range(13, 17):
        cache.get(i)

    others = list(range(12)) + list(range(13, 17))
    assert len(cache) == 17
    assert cache.frequencies() == {1: [12], 2: others}

    cache.put(23, 100007)

    assert len(cache) == 17
    assert 12 not in cache
    assert cache.frequencies() == {1: [23], 2: others}
    assert cache.monitor.get_eviction_count() == 1
    assert cache.get(12) is None
    for i in others:
        assert cache.get(i) == i * i
    assert cache.get(23) == 100007


def test_eviction_falls_through_empty_head(make_cache):
    cache = make_cache(max_entries=3)
    for key in "abc":
        cache.put(key, key.upper())
    cache.get("b")
    cache.get("a")
    cache.get("c")
    cache.get("c")
    assert cache.frequencies() == {1: [], 2: ["b", "a"], 3: ["c"]}

    cache.put("d", "D")
    assert "b" not in cache
    assert cache.frequencies() == {1: ["d"], 2: ["a"], 3: ["c"]}


def test_get_increments_frequency_by_one(make_cache):
    cache = make_cache()
    cache.put("k", "v")
    for expected in range(2, 7):
        cache.get("k")
        assert cache.frequency_of("k") == expected


def test_contains_and_iteration_do_not_touch_frequency(make_cache):
    cache = make_cache()
    cache.put("k", "v")
    assert "k" in cache
    assert cache.keys() == ["k"]
    assert cache.values() == ["v"]
    assert cache.items() == [("k", "v")]
    assert list(cache) == ["k"]
    assert cache.frequency_of("k") == 1


def test_put_existing_key_resets_frequency(make_cache, clock):
    cache = make_cache()
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.get("a")
    assert cache.frequency_of("a") == 3

    assert cache.put("a", 10) == 1
    assert cache.frequency_of("a") == 1
    assert cache.frequencies() == {1: ["b", "a"]}
    assert cache.get("a") == 10
    assert len(cache) == 2


def test_put_existing_key_refreshes_timestamp(make_cache, clock):
    cache = make_cache(invalidation_timeout=10)
    cache.put("a", 1)
    cache.put("b", 2)
    clock.advance(6)
    cache.put("a", 3)
    assert cache.keys() == ["b", "a"]
    clock.advance(6)
    assert cache.get("b") is None
    assert cache.get("a") == 3


def test_put_existing_key_does_not_evict(make_cache):
    cache = make_cache(max_entries=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("b", 3)
    assert cache.keys() == ["a", "b"]
    assert cache.monitor.get_eviction_count() == 0


def test_remove(make_cache):
    cache = make_cache()
    cache.put("a", 1)
    cache.get("a")
    assert cache.remove("a") == 1
    assert cache.remove("a") is None
    assert cache.remove("missing", "fallback") == "fallback"
    assert cache.frequencies() == {1: []}
    assert len(cache) == 0


def test_mapping_access(make_cache):
    cache = make_cache()
    cache["a"] = 1
    assert cache["a"] == 1
    assert cache.frequency_of("a") == 2
    del cache["a"]
    with pytest.raises(KeyError):
        cache["a"]
    with pytest.raises(KeyError):
        del cache["a"]


def test_get_default(make_cache):
    cache = make_cache()
    assert cache.get("missing") is None
    assert cache.get("missing", 42) == 42
    assert cache.monitor.misses == 2


def test_none_values_are_stored(make_cache):
    cache = make_cache()
    cache.put("a", None)
    assert "a" in cache
    assert cache.get("a", "absent") is None
    assert cache.frequency_of("a") == 2


def test_expired_entries_are_absent(make_cache, clock):
    cache = make_cache(invalidation_timeout=1.0)
    for i in range(10):
        cache.put(i, i * i)
    clock.advance(0.5)
    for i in range(10, 20):
        cache.put(i, i * i)
    clock.advance(0.7)

    for i in range(10):
        assert cache.get(i) is None
    for i in range(10, 20):
        assert cache.get(i) == i * i
    assert cache.monitor.get_expiration_count() == 10


def test_entry_expires_exactly_at_timeout(make_cache, clock):
    cache = make_cache(invalidation_timeout=5)
    cache.put("a", 1)
    clock.advance(4.75)
    assert cache.get("a") == 1
    clock.advance(0.25)
    assert cache.get("a") is None


def test_eager_purge_keeps_size_exact(make_cache, clock):
    cache = make_cache(invalidation_timeout=1)
    for i in range(5):
        cache.put(i, i)
    clock.advance(2)
    assert len(cache) == 0
    assert cache.keys() == []
    assert cache.frequencies() == {1: []}


def test_eager_purge_frees_space_before_evicting(make_cache, clock):
    cache = make_cache(max_entries=3, invalidation_timeout=1)
    cache.put("stale", 0)
    clock.advance(0.5)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.get("b")
    clock.advance(0.6)
    cache.put("c", 3)
    assert cache.keys() == ["a", "b", "c"]
    assert cache.monitor.get_eviction_count() == 0
    assert cache.monitor.get_expiration_count() == 1


def test_lazy_purge_keeps_stale_entries_until_scanned(make_cache, clock):
    cache = make_cache(invalidation_timeout=1, eager_purge=False)
    for i in range(10):
        cache.put(i, i * i)
    clock.advance(1.2)

    assert len(cache.keys()) == 10
    assert cache.size() == 10
    assert 0 not in cache

    # Reading an expired key removes just that key
    assert cache.get(0) is None
    assert len(cache.keys()) == 9

    assert cache.purge_invalid_entries() == 9
    assert cache.keys() == []
    assert cache.frequencies() == {1: []}


def test_lazy_purge_stale_entries_occupy_capacity(make_cache, clock):
    cache = make_cache(max_entries=2, invalidation_timeout=1, eager_purge=False)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("b")
    clock.advance(5)
    cache.put("c", 3)
    # Stale "a" was the least frequently used, so it was evicted, not purged
    assert cache.monitor.get_eviction_count() == 1
    assert cache.keys() == ["b", "c"]


def test_lazy_put_over_expired_key_reports_no_previous(make_cache, clock):
    cache = make_cache(invalidation_timeout=1, eager_purge=False)
    cache.put("a", 1)
    clock.advance(2)
    assert cache.put("a", 2) is None
    assert cache.get("a") == 2


def test_remove_expired_key_reports_absent(make_cache, clock):
    cache = make_cache(invalidation_timeout=1, eager_purge=False)
    cache.put("a", 1)
    clock.advance(1)
    assert cache.remove("a") is None
    assert cache.keys() == []


def test_purge_stops_at_first_fresh_entry(make_cache, clock):
    cache = make_cache(invalidation_timeout=10, eager_purge=False)
    cache.put("old", 1)
    clock.advance(5)
    cache.put("new", 2)
    clock.advance(6)
    assert cache.purge_invalid_entries() == 1
    assert cache.keys() == ["new"]


def test_clear_and_reset(make_cache):
    cache = make_cache()
    cache.put("a", 1)
    cache.get("a")
    cache.clear()
    assert len(cache) == 0
    assert cache.frequencies() == {1: []}
    assert cache.monitor.hits == 1
    cache.put("b", 2)
    cache.reset()
    assert cache.monitor.hits == 0
    assert cache.keys() == []


def test_summary(make_cache):
    cache = make_cache(max_entries=2)
    cache.put("a", 1)
    cache.get("a")
    cache.get("x")
    summary = cache.summary()
    assert summary["hits"] == 1
    assert summary["misses"] == 1
    assert summary["hit_ratio"] == 0.5
    assert summary["size"] == 1
    assert summary["buckets"] == 2


def test_from_config():
    config = dict(CONFIG, cache_size=8, invalidation_timeout=2.5, eager_purge=False)
    cache = LFUTTLCache.from_config(config)
    assert (cache.max_entries, cache.invalidation_timeout, cache.eager_purge) == (8, 2.5, False)

    cache = LFUTTLCache.from_config({"cache_size": 4}, eager_purge=False)
    assert cache.max_entries == 4
    assert cache.invalidation_timeout == CONFIG["invalidation_timeout"]
    assert cache.eager_purge is False


def test_random_operations_preserve_invariants(make_cache, clock):
    rng = random.Random(7)
    cache = make_cache(max_entries=64, invalidation_timeout=50)
    for _ in range(5000):
        op = rng.random()
        key = rng.randrange(128)
        if op < 0.45:
            cache.put(key, rng.random())
        elif op < 0.9:
            cache.get(key)
        else:
            cache.remove(key)
        clock.advance(rng.random())
        assert len(cache._entries) <= 64
    assert_consistent(cache)
    assert cache.total_frequency_count() == len(cache)


def test_many_random_entries_fill_to_capacity():
    rng = random.Random(11)
    cache = LFUTTLCache()
    for _ in range(20000):
        cache.put(rng.randrange(2048), rng.randrange(2 ** 31))
        cache.get(rng.randrange(2048))
    assert cache.size() == 1024
    assert cache.total_frequency_count() == 1024
    assert_consistent(cache)


def test_expiry_with_real_clock():
    cache = LFUTTLCache(invalidation_timeout=1)
    for i in range(10):
        cache.put(i, i * i)
    time.sleep(0.5)
    for i in range(10, 20):
        cache.put(i, i * i)
    time.sleep(0.7)

    for i in range(10):
        assert cache.get(i) is None
    for i in range(10, 20):
        assert cache.get(i) == i * i


def test_lazy_expiry_with_real_clock():
    cache = LFUTTLCache(invalidation_timeout=1, eager_purge=False)
    for i in range(10):
        cache.put(i, i * i)
    time.sleep(1.2)
    assert len(cache.keys()) == 10
    for i in range(10):
        assert cache.get(i) is None
    assert cache.keys() == []


def test_remove_does_not_scan_other_entries(make_cache, clock):
    cache = make_cache(invalidation_timeout=1)
    cache.put("stale", 0)
    cache.put("a", 1)
    clock.advance(2)
    assert cache.remove("missing") is None
    assert list(cache._entries) == ["stale", "a"]
    assert cache.monitor.get_expiration_count() == 0
