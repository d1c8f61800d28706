"""Cache administration routes (stats and purge)."""

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from typing import Optional

from core.cache import CacheManager
from core.container import container
from core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api/cache", tags=["cache"])


class InvalidatePatternRequest(BaseModel):
    pattern: str = Field(max_length=512)


class ProductPurgeRequest(BaseModel):
    product_id: Optional[str] = None


@router.get("/stats")
async def get_cache_stats(
    response: Response,
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Hit rate, counters and memory utilization."""
    response.headers["Cache-Control"] = "no-store"
    return {"success": True, "stats": cache.get_stats()}


@router.post("/purge/all")
async def purge_all(
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Drop every cached entry."""
    removed = cache.clear()
    logger.info("Cache purged", scope="all", removed=removed)
    return {"success": True, "removed": removed}


@router.post("/purge/products")
async def purge_products(
    request: Optional[ProductPurgeRequest] = None,
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Invalidate one product, or all product data when no id is given."""
    product_id = request.product_id if request else None
    removed = cache.invalidate_product_cache(product_id)
    logger.info("Cache purged", scope="products", product_id=product_id, removed=removed)
    return {"success": True, "removed": removed}


@router.post("/purge/static")
async def purge_static(
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Invalidate cached static content."""
    removed = cache.invalidate_static_cache()
    logger.info("Cache purged", scope="static", removed=removed)
    return {"success": True, "removed": removed}


@router.post("/invalidate")
async def invalidate_pattern(
    request: InvalidatePatternRequest,
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Remove every key containing the given substring."""
    if not request.pattern:
        raise HTTPException(status_code=400, detail="Pattern is required")
    removed = cache.invalidate_pattern(request.pattern)
    return {"success": True, "pattern": request.pattern, "removed": removed}


@router.delete("/keys/{key:path}")
async def delete_key(
    key: str,
    cache: CacheManager = Depends(lambda: container.cache_manager())
):
    """Delete a single key."""
    deleted = cache.delete(key)
    return {"success": True, "deleted": deleted}
