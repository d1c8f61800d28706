"""
FastAPI host for the in-process cache manager.

The cache is a volatile, single-process accelerator: request handlers call
get/set/delete on it, the middleware applies route cache policies, and a
background scheduler sweeps expired entries and warms the catalog.
"""

from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.container import container
from core.logging import configure_logging, get_logger
from middleware.http_cache import HttpCacheMiddleware
from routers import cache as cache_router

# Initialize settings and logging
settings = container.settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting cache services")

    await container.cache_manager().startup()

    logger.info("Services started successfully")
    yield

    await container.cache_manager().shutdown()
    logger.info("Services shutdown complete")


app = FastAPI(
    title="Cache Manager Service",
    version="1.0.0",
    description="Bounded in-process cache with route-aware HTTP cache policies",
    lifespan=lifespan,
    default_response_class=ORJSONResponse
)


class CatchAllExceptionsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {type(e).__name__}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": f"{type(e).__name__}: {str(e)}",
                    "detail": "Internal server error"
                }
            )


# Exception middleware is added last so it wraps the cache header middleware
app.add_middleware(HttpCacheMiddleware)
app.add_middleware(CatchAllExceptionsMiddleware)

app.include_router(cache_router.router)


@app.get("/health")
async def health_check():
    """Detailed health check."""
    cache = container.cache_manager()
    return {
        "status": "OK",
        "service": "cache",
        "version": "1.0.0",
        "environment": "development" if settings.debug else "production",
        "cache": {
            "maintenance_running": cache.is_maintenance_running(),
            "stats": cache.get_stats(),
        },
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting cache service",
               host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
