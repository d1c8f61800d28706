"""Centralized constants for HTTP cache policies and cache key namespaces.

This module provides a single source of truth for the route policy table and
the key prefixes used by invalidation and warm-up, so routers, middleware and
services never repeat string literals.
"""

from typing import Tuple

from models.cache import RouteClass, RoutePolicy

# =============================================================================
# HTTP CACHE HEADERS
# =============================================================================

VARY_HEADER = "Accept-Encoding, User-Agent"

_STATIC_IMMUTABLE = "public, max-age=31536000, immutable"  # 1 year
_NO_STORE = "private, no-cache, no-store, must-revalidate"

# Order matters: resolution is first-match in this exact order.
ROUTE_CACHE_POLICIES: Tuple[RoutePolicy, ...] = (
    # Static assets - long cache
    RoutePolicy("/css/", _STATIC_IMMUTABLE, RouteClass.STATIC),
    RoutePolicy("/js/", _STATIC_IMMUTABLE, RouteClass.STATIC),
    RoutePolicy("/images/", "public, max-age=2592000", RouteClass.STATIC),  # 30 days

    # API endpoints - short cache, longer at the CDN
    RoutePolicy("/api/products", "public, max-age=300, s-maxage=600", RouteClass.API),
    RoutePolicy("/api/categories", "public, max-age=3600, s-maxage=7200", RouteClass.API),
    RoutePolicy("/api/brands", "public, max-age=3600, s-maxage=7200", RouteClass.API),

    # Per-user content - never shared
    RoutePolicy("/api/cart", _NO_STORE, RouteClass.DYNAMIC),
    RoutePolicy("/api/user", _NO_STORE, RouteClass.DYNAMIC),

    # HTML pages - moderate cache
    RoutePolicy("/", "public, max-age=300, s-maxage=600", RouteClass.HTML),
    RoutePolicy("/products.html", "public, max-age=600, s-maxage=1200", RouteClass.HTML),
)

DEFAULT_ROUTE_POLICY = RoutePolicy("", "public, max-age=300", RouteClass.DEFAULT)

# =============================================================================
# CACHE KEY NAMESPACES
# =============================================================================

PRODUCT_KEY_PREFIX = "product:"
PRODUCTS_KEY_PREFIX = "products:"
STATIC_KEY_PREFIX = "static:"
USER_KEY_PREFIXES: Tuple[str, ...] = ("user:", "cart:", "orders:")

# Warm-up targets: key -> TTL in milliseconds
CATEGORIES_KEY = "categories:all"
BRANDS_KEY = "brands:all"
FEATURED_PRODUCTS_KEY = "products:featured"
POPULAR_PRODUCTS_KEY = "products:popular"

CATALOG_TTL_MS = 60 * 60 * 1000  # 1 hour
PRODUCT_LIST_TTL_MS = 30 * 60 * 1000  # 30 minutes
