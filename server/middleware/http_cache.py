"""HTTP cache header middleware.

Applies route Cache-Control policies and ETags to responses and answers
conditional GET/HEAD requests with 304 Not Modified.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from core.container import container
from services.cache import RoutePolicyResolver

logger = logging.getLogger(__name__)

# If-None-Match on other methods is a precondition (412), never a 304
CONDITIONAL_METHODS = frozenset(["GET", "HEAD"])


def query_mapping(request: Request) -> Dict[str, Any]:
    """Query parameters in request order; a repeated key maps to a list."""
    query: Dict[str, Any] = {}
    for name, value in request.query_params.multi_items():
        if name not in query:
            query[name] = value
        elif isinstance(query[name], list):
            query[name].append(value)
        else:
            query[name] = [query[name], value]
    return query


class HttpCacheMiddleware(BaseHTTPMiddleware):
    """Middleware setting cache headers from the route policy table."""

    def __init__(self, app, resolver: Optional[RoutePolicyResolver] = None):
        super().__init__(app)
        self.resolver = resolver

    def _get_resolver(self) -> RoutePolicyResolver:
        if self.resolver is not None:
            return self.resolver
        return container.cache_manager().resolver

    async def dispatch(self, request: Request, call_next):
        resolver = self._get_resolver()
        path = request.url.path
        headers = resolver.build_headers(path, query_mapping(request))

        if request.method in CONDITIONAL_METHODS and resolver.should_return_not_modified(
            request.headers.get("if-none-match"), headers["ETag"]
        ):
            logger.debug("Conditional request not modified: %s", path)
            return Response(status_code=304, headers=headers)

        response = await call_next(request)

        # Headers set by the route handler take precedence
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response
