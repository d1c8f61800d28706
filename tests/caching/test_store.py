import threading

import pytest

from conftest import assert_accounting, payload
from services.cache import CacheSerializationError, CacheStore


def test_get_missing_key_is_a_miss(store):
    assert store.get("nope") is None
    assert store.stats.misses == 1
    assert store.stats.hits == 0


def test_set_then_get_hits(store):
    assert store.set("k", {"a": 1}) is True
    assert store.get("k") == {"a": 1}
    assert store.stats.hits == 1
    assert store.stats.sets == 1
    assert_accounting(store)


def test_default_ttl_is_used_when_omitted(clock):
    store = CacheStore(max_memory_size=1000, default_ttl_ms=300000, clock=clock)
    store.set("k", 1)
    entry = store.peek("k")
    assert entry.ttl_ms == 300000
    assert entry.expires_at == entry.created_at + 300000


def test_stored_value_is_not_aliased(store):
    value = {"items": [1, 2]}
    store.set("k", value)
    value["items"].append(3)
    assert store.get("k") == {"items": [1, 2]}


def test_value_returned_by_get_is_not_aliased(store):
    store.set("k", {"items": [1, 2]})
    size = store.peek("k").size_bytes

    got = store.get("k")
    got["items"].extend(["x" * 50] * 20)

    assert store.get("k") == {"items": [1, 2]}
    assert store.peek("k").size_bytes == size
    assert_accounting(store)


def test_accounting_holds_across_mixed_operations(store, clock):
    store.set("a", payload(40))
    store.set("b", payload(60), ttl_ms=1)
    store.set("c", payload(80))
    assert_accounting(store)

    store.delete("a")
    assert_accounting(store)

    clock.advance(5)
    store.purge_expired()
    assert_accounting(store)

    for i in range(20):
        store.set(f"fill:{i}", payload(90))
        assert_accounting(store)

    store.invalidate_pattern("fill:1")
    assert_accounting(store)


def test_budget_holds_after_every_set(store, clock):
    for i in range(25):
        clock.advance(1)
        assert store.set(f"k{i}", payload(100)) is True
        assert store.memory_usage <= store.max_memory_size
    assert len(store) == 10
    assert store.stats.evictions == 15


def test_oversized_value_is_rejected_without_mutation(store):
    assert store.set("big", payload(101)) is False
    assert "big" not in store
    assert store.memory_usage == 0
    assert store.stats.sets == 0


def test_oversized_replace_leaves_existing_entry_untouched(store):
    store.set("k", payload(50))
    assert store.set("k", payload(200)) is False
    assert store.peek("k").size_bytes == 50
    assert store.memory_usage == 50


def test_value_at_admission_limit_is_accepted(store):
    assert store.set("k", payload(100)) is True


def test_full_store_evicts_least_recently_accessed(store, clock):
    for i in range(10):
        clock.advance(1)
        store.set(f"k{i}", payload(100))

    clock.advance(1)
    store.set("new", payload(100))

    assert "k0" not in store
    assert "k1" in store
    assert "new" in store


def test_get_refreshes_recency(store, clock):
    for i in range(10):
        clock.advance(1)
        store.set(f"k{i}", payload(100))

    clock.advance(1)
    store.get("k0")
    assert store.peek("k0").last_accessed_at == clock.now

    clock.advance(1)
    store.set("new", payload(100))

    assert "k0" in store
    assert "k1" not in store


def test_eviction_repeats_until_new_entry_fits(store, clock):
    for i in range(20):
        clock.advance(1)
        store.set(f"k{i}", payload(50))

    clock.advance(1)
    store.set("wide", payload(100))

    assert "k0" not in store
    assert "k1" not in store
    assert "k2" in store
    assert len(store) == 19
    assert store.stats.evictions == 2
    assert_accounting(store)


def test_replacing_key_in_full_store_does_not_evict(store, clock):
    for i in range(10):
        clock.advance(1)
        store.set(f"k{i}", payload(100))

    store.set("k5", payload(100))

    assert len(store) == 10
    assert store.stats.evictions == 0


def test_entry_is_retrievable_at_deadline_and_gone_after(store, clock):
    store.set("k", "v", ttl_ms=100)

    clock.advance(100)
    assert store.get("k") == "v"

    clock.advance(1)
    assert store.get("k") is None
    assert "k" not in store
    assert store.memory_usage == 0
    assert store.stats.misses == 1
    assert store.stats.expirations == 1


def test_zero_ttl_expires_on_next_get(store):
    assert store.set("k", "v", ttl_ms=0) is True
    assert store.get("k") is None
    assert store.stats.misses == 1


def test_delete_is_idempotent(store):
    store.set("k", payload(30))
    assert store.delete("k") is True
    usage = store.memory_usage
    assert store.delete("k") is False
    assert store.memory_usage == usage == 0
    assert store.stats.deletes == 1


def test_replace_keeps_single_entry_and_new_size(store):
    store.set("k", payload(50), ttl_ms=1000)
    store.set("k", payload(80), ttl_ms=2000)

    assert len(store) == 1
    assert store.memory_usage == 80
    assert store.peek("k").ttl_ms == 2000
    assert store.stats.sets == 2


def test_invalidate_pattern_removes_literal_substring_matches(store):
    for key in ("products:1", "products:2", "user:5"):
        store.set(key, key)

    assert store.invalidate_pattern("products:") == 2
    assert store.keys() == ["user:5"]
    assert store.stats.deletes == 2
    assert_accounting(store)


def test_invalidate_pattern_is_not_a_glob(store):
    store.set("products:1", 1)
    assert store.invalidate_pattern("products:*") == 0
    assert store.invalidate_pattern("nothing") == 0


def test_non_serializable_value_propagates(store):
    with pytest.raises(CacheSerializationError):
        store.set("k", {1, 2, 3})
    assert "k" not in store
    assert store.stats.sets == 0


def test_purge_expired_removes_all_expired(store, clock):
    for key in ("a", "b", "c"):
        store.set(key, payload(20), ttl_ms=1)
    store.set("keep", payload(20), ttl_ms=10000)

    clock.advance(2)

    assert store.purge_expired() == 3
    assert store.keys() == ["keep"]
    assert store.memory_usage == 20
    assert store.stats.expirations == 3


def test_clear_empties_store_but_keeps_counters(store):
    store.set("a", 1)
    store.set("b", 2)
    assert store.clear() == 2
    assert len(store) == 0
    assert store.memory_usage == 0
    assert store.stats.sets == 2


def test_rejects_non_positive_budget():
    with pytest.raises(ValueError):
        CacheStore(max_memory_size=0)


def test_concurrent_sets_keep_accounting_consistent():
    store = CacheStore(max_memory_size=5000)

    def writer(prefix):
        for i in range(200):
            store.set(f"{prefix}:{i % 30}", payload(50 + i % 40))
            store.get(f"{prefix}:{(i * 7) % 30}")
            if i % 11 == 0:
                store.delete(f"{prefix}:{i % 30}")

    threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert_accounting(store)
