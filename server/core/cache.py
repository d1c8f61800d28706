"""Cache manager: the process-wide cache and its lifecycle.

Bundles the memory store, the HTTP route policies and the maintenance
scheduler behind one object. The composition root (core.container) owns the
single instance and hands it to routers and middleware; nothing is created
or started at import time.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from constants import (
    PRODUCT_KEY_PREFIX,
    PRODUCTS_KEY_PREFIX,
    STATIC_KEY_PREFIX,
    USER_KEY_PREFIXES,
)
from core.config import Settings
from core.logging import get_logger
from services.cache import (
    CacheStore,
    MaintenanceScheduler,
    NullCatalogSource,
    RoutePolicyResolver,
    build_catalog_producers,
)

if TYPE_CHECKING:
    from services.cache import CatalogSource

logger = get_logger(__name__)


class CacheManager:
    """Multi-tier cache facade used by request handlers.

    Lifecycle:
    - create(settings): build store, resolver and scheduler from settings
    - startup(): register warm-up producers and start background maintenance
    - shutdown(): cancel maintenance jobs
    """

    def __init__(self, store: CacheStore, resolver: RoutePolicyResolver,
                 maintenance: MaintenanceScheduler,
                 settings: Optional[Settings] = None,
                 catalog_source: Optional["CatalogSource"] = None):
        self.store = store
        self.resolver = resolver
        self.maintenance = maintenance
        self.settings = settings or Settings()
        self.catalog_source = catalog_source or NullCatalogSource()

    @classmethod
    def create(cls, settings: Settings,
               catalog_source: Optional["CatalogSource"] = None,
               clock=None) -> "CacheManager":
        """Build a manager from settings. Does not start any background job."""
        store = CacheStore(
            max_memory_size=settings.cache_max_memory_size,
            max_entry_ratio=settings.cache_max_entry_ratio,
            default_ttl_ms=settings.cache_default_ttl_ms,
            clock=clock,
        )
        resolver = RoutePolicyResolver(match=settings.cache_route_match)
        maintenance = MaintenanceScheduler(
            store,
            sweep_interval=settings.cache_sweep_interval,
            warmup_interval=settings.cache_warmup_interval,
            warmup_initial_delay=settings.cache_warmup_initial_delay,
        )
        return cls(store, resolver, maintenance,
                   settings=settings, catalog_source=catalog_source)

    async def startup(self) -> None:
        """Register catalog producers and start the maintenance scheduler."""
        for name, producer in build_catalog_producers(self.store, self.catalog_source).items():
            self.maintenance.register_producer(name, producer)

        if self.settings.cache_maintenance_enabled:
            self.maintenance.start()
        else:
            logger.info("Cache maintenance disabled")

        logger.info("Memory cache initialized",
                    max_memory_size=self.store.max_memory_size,
                    route_match=self.resolver.match)

    async def shutdown(self) -> None:
        """Stop background maintenance. Cached entries are left in place."""
        await self.maintenance.stop()
        logger.info("Memory cache shut down", entries=len(self.store))

    def is_maintenance_running(self) -> bool:
        return self.maintenance.running

    # ============================================================================
    # Cache operations
    # ============================================================================

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        return self.store.get(key)

    def set(self, key: str, value: Any, ttl_ms: Optional[float] = None) -> bool:
        """Set value in cache; False when the value is too large to admit."""
        return self.store.set(key, value, ttl_ms)

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        return self.store.delete(key)

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove keys containing ``pattern``; returns the count removed."""
        return self.store.invalidate_pattern(pattern)

    def clear(self) -> int:
        return self.store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Counters, hit rate and memory utilization."""
        return self.store.stats.snapshot(
            memory_usage=self.store.memory_usage,
            max_memory_size=self.store.max_memory_size,
            cache_size=len(self.store),
        )

    # ============================================================================
    # Domain invalidation
    # ============================================================================

    def invalidate_product_cache(self, product_id: Optional[Any] = None) -> int:
        """Invalidate one product's keys, or every product list and product key."""
        if product_id is not None:
            return self.invalidate_pattern(f"{PRODUCT_KEY_PREFIX}{product_id}")
        removed = self.invalidate_pattern(PRODUCTS_KEY_PREFIX)
        removed += self.invalidate_pattern(PRODUCT_KEY_PREFIX)
        return removed

    def invalidate_user_cache(self, user_id: Any) -> int:
        """Invalidate a user's profile, cart and order keys."""
        return sum(self.invalidate_pattern(f"{prefix}{user_id}") for prefix in USER_KEY_PREFIXES)

    def invalidate_static_cache(self) -> int:
        return self.invalidate_pattern(STATIC_KEY_PREFIX)
