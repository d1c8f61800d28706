import pytest

from core.cache import CacheManager
from core.config import Settings
from services.cache import CacheSerializationError, SWEEP_JOB_ID


@pytest.fixture
def manager(clock):
    settings = Settings(
        cache_max_memory_size=10_000,
        cache_maintenance_enabled=False,
        cache_warmup_initial_delay=60,
    )
    return CacheManager.create(settings, clock=clock)


def test_create_applies_settings(manager):
    assert manager.store.max_memory_size == 10_000
    assert manager.store.max_entry_size == 1000
    assert manager.store.default_ttl_ms == 300000
    assert manager.resolver.match == "first"
    assert manager.maintenance.sweep_interval == 300
    assert not manager.is_maintenance_running()


def test_basic_operations(manager):
    assert manager.get("k") is None
    assert manager.set("k", {"v": 1}) is True
    assert manager.get("k") == {"v": 1}
    assert manager.delete("k") is True
    assert manager.delete("k") is False


def test_serialization_failure_propagates(manager):
    with pytest.raises(CacheSerializationError):
        manager.set("k", object())


def test_get_stats_shape(manager):
    manager.set("a", "x" * 98)
    manager.get("a")
    manager.get("b")

    stats = manager.get_stats()

    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["sets"] == 1
    assert stats["deletes"] == 0
    assert stats["hitRate"] == "50.00%"
    assert stats["memoryUsage"] == {
        "current": "100 Bytes",
        "max": "9.77 KB",
        "percentage": "1.00%",
    }
    assert stats["cacheSize"] == 1


def test_invalidate_single_product(manager):
    for key in ("product:1", "product:1:reviews", "product:2", "products:featured"):
        manager.set(key, key)

    assert manager.invalidate_product_cache("1") == 2
    assert sorted(manager.store.keys()) == ["product:2", "products:featured"]


def test_invalidate_all_products(manager):
    for key in ("product:1", "products:featured", "products:popular", "brands:all"):
        manager.set(key, key)

    assert manager.invalidate_product_cache() == 3
    assert manager.store.keys() == ["brands:all"]


def test_invalidate_user_cache(manager):
    for key in ("user:5", "cart:5", "orders:5:recent", "user:6", "cart:6"):
        manager.set(key, key)

    assert manager.invalidate_user_cache(5) == 3
    assert sorted(manager.store.keys()) == ["cart:6", "user:6"]


async def test_startup_registers_catalog_producers_without_scheduler(manager):
    await manager.startup()
    assert set(manager.maintenance.producers) == {
        "categories", "brands", "featured_products", "popular_products",
    }
    assert not manager.is_maintenance_running()
    await manager.shutdown()


async def test_startup_and_shutdown_control_maintenance(clock):
    settings = Settings(cache_max_memory_size=10_000, cache_warmup_initial_delay=60)
    manager = CacheManager.create(settings, clock=clock)

    await manager.startup()
    assert manager.is_maintenance_running()

    await manager.shutdown()
    assert not manager.is_maintenance_running()

    await manager.startup()
    assert manager.is_maintenance_running()
    assert manager.maintenance.scheduler.get_job(SWEEP_JOB_ID) is not None
    await manager.shutdown()
    await manager.shutdown()
    assert not manager.is_maintenance_running()
