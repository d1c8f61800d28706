"""In-memory cache models.

Entries and route policies are plain dataclasses; nothing here is persisted.
All timestamps are milliseconds from the store's clock.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass
class CacheEntry:
    """A single cached value plus its accounting and TTL bookkeeping.

    size_bytes is measured once at insertion and never recomputed on read.
    """
    key: str
    value: Any
    size_bytes: int
    created_at: float
    last_accessed_at: float
    ttl_ms: float
    expires_at: float


class RouteClass(str, Enum):
    """Route classification, informational only (not used for eviction)."""
    STATIC = "static"
    API = "api"
    DYNAMIC = "dynamic"
    HTML = "html"
    DEFAULT = "default"


@dataclass(frozen=True)
class RoutePolicy:
    """Cache-Control directive for requests under a path prefix."""
    path_prefix: str
    cache_control: str
    classification: RouteClass
