"""Catalog warm-up producers.

Each producer fetches one commonly requested collection from a catalog
source and stores it under a well-known key. The database-backed source is
an external collaborator; NullCatalogSource stands in until one is wired.
"""

from typing import Any, Dict, List, Protocol

from constants import (
    BRANDS_KEY,
    CATALOG_TTL_MS,
    CATEGORIES_KEY,
    FEATURED_PRODUCTS_KEY,
    POPULAR_PRODUCTS_KEY,
    PRODUCT_LIST_TTL_MS,
)
from .maintenance import WarmupProducer
from .store import CacheStore


class CatalogSource(Protocol):
    """Read side of the product catalog used to pre-populate the cache."""

    async def fetch_categories(self) -> List[Dict[str, Any]]: ...

    async def fetch_brands(self) -> List[Dict[str, Any]]: ...

    async def fetch_featured_products(self) -> List[Dict[str, Any]]: ...

    async def fetch_popular_products(self) -> List[Dict[str, Any]]: ...


class NullCatalogSource:
    """Catalog source with no backing database; every collection is empty."""

    async def fetch_categories(self) -> List[Dict[str, Any]]:
        return []

    async def fetch_brands(self) -> List[Dict[str, Any]]:
        return []

    async def fetch_featured_products(self) -> List[Dict[str, Any]]:
        return []

    async def fetch_popular_products(self) -> List[Dict[str, Any]]:
        return []


def _producer(store: CacheStore, key: str, fetch, ttl_ms: int) -> WarmupProducer:
    async def warm() -> bool:
        return store.set(key, await fetch(), ttl_ms)
    warm.__name__ = f"warm_{key.replace(':', '_')}"
    return warm


def build_catalog_producers(store: CacheStore, source: CatalogSource) -> Dict[str, WarmupProducer]:
    """Producers for categories, brands, featured and popular products."""
    return {
        "categories": _producer(store, CATEGORIES_KEY, source.fetch_categories, CATALOG_TTL_MS),
        "brands": _producer(store, BRANDS_KEY, source.fetch_brands, CATALOG_TTL_MS),
        "featured_products": _producer(
            store, FEATURED_PRODUCTS_KEY, source.fetch_featured_products, PRODUCT_LIST_TTL_MS
        ),
        "popular_products": _producer(
            store, POPULAR_PRODUCTS_KEY, source.fetch_popular_products, PRODUCT_LIST_TTL_MS
        ),
    }
