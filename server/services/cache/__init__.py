"""In-process cache package.

Bounded memory cache with:
- JSON size estimation and admission control
- Per-entry TTL with lazy and active expiration
- LRU eviction under a global memory budget
- Route-aware Cache-Control / ETag resolution
- APScheduler-driven sweep and warm-up
"""

from .sizing import (
    CacheSerializationError,
    JsonSizeEstimator,
    format_bytes,
)
from .expiry import compute_expires_at, is_expired
from .eviction import LRUEvictionEngine
from .stats import StatsCollector, hit_rate_percent, memory_utilization_percent
from .store import CacheStore, DEFAULT_TTL_MS, DEFAULT_MAX_MEMORY_SIZE
from .route_policy import (
    RoutePolicyResolver,
    generate_etag,
    serialize_query,
)
from .maintenance import (
    MaintenanceScheduler,
    WarmupProducer,
    SWEEP_JOB_ID,
    WARMUP_JOB_ID,
    WARMUP_INITIAL_JOB_ID,
)
from .warmup import (
    CatalogSource,
    NullCatalogSource,
    build_catalog_producers,
)

__all__ = [
    # Sizing
    "CacheSerializationError",
    "JsonSizeEstimator",
    "format_bytes",
    # Expiry
    "compute_expires_at",
    "is_expired",
    # Eviction
    "LRUEvictionEngine",
    # Stats
    "StatsCollector",
    "hit_rate_percent",
    "memory_utilization_percent",
    # Store
    "CacheStore",
    "DEFAULT_TTL_MS",
    "DEFAULT_MAX_MEMORY_SIZE",
    # HTTP policies
    "RoutePolicyResolver",
    "generate_etag",
    "serialize_query",
    # Maintenance
    "MaintenanceScheduler",
    "WarmupProducer",
    "SWEEP_JOB_ID",
    "WARMUP_JOB_ID",
    "WARMUP_INITIAL_JOB_ID",
    # Warm-up
    "CatalogSource",
    "NullCatalogSource",
    "build_catalog_producers",
]
