"""Route-aware HTTP cache policy resolution and ETag handling."""

import hashlib
import json
from email.utils import formatdate
from typing import Any, Dict, Iterable, Literal, Mapping, Optional, Tuple

from constants import DEFAULT_ROUTE_POLICY, ROUTE_CACHE_POLICIES, VARY_HEADER
from models.cache import RoutePolicy


def generate_etag(content: str) -> str:
    """128-bit MD5 hex digest of the UTF-8 bytes of ``content``."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def serialize_query(query_params: Optional[Mapping[str, Any]]) -> str:
    """Compact JSON form of the query parameters, in their given order."""
    return json.dumps(dict(query_params or {}), separators=(",", ":"), ensure_ascii=False)


class RoutePolicyResolver:
    """Maps request paths to Cache-Control policies by prefix.

    Resolution is first-match over the registration order by default, so
    specific prefixes have to be registered before general ones. With
    ``match="longest"`` the longest matching prefix wins regardless of order.
    """

    def __init__(self,
                 policies: Iterable[RoutePolicy] = ROUTE_CACHE_POLICIES,
                 default: RoutePolicy = DEFAULT_ROUTE_POLICY,
                 match: Literal["first", "longest"] = "first"):
        if match not in ("first", "longest"):
            raise ValueError(f"Unknown route match mode: {match}")
        self.policies: Tuple[RoutePolicy, ...] = tuple(policies)
        self.default = default
        self.match = match

    def resolve(self, path: str) -> RoutePolicy:
        """Return the policy for ``path``, or the default policy."""
        if self.match == "longest":
            best: Optional[RoutePolicy] = None
            for policy in self.policies:
                if path.startswith(policy.path_prefix):
                    if best is None or len(policy.path_prefix) > len(best.path_prefix):
                        best = policy
            return best or self.default

        for policy in self.policies:
            if path.startswith(policy.path_prefix):
                return policy
        return self.default

    def build_headers(self, path: str,
                      query_params: Optional[Mapping[str, Any]] = None,
                      now: Optional[float] = None) -> Dict[str, str]:
        """Response headers for a request.

        Last-Modified is the time of the call, not the content's real
        modification time; only the ETag is meaningful for revalidation.

        Args:
            path: Request path, without the query string
            query_params: Query parameters as a mapping
            now: Unix timestamp in seconds for Last-Modified (defaults to now)
        """
        policy = self.resolve(path)
        return {
            "Cache-Control": policy.cache_control,
            "ETag": generate_etag(path + serialize_query(query_params)),
            "Vary": VARY_HEADER,
            "Last-Modified": formatdate(now, usegmt=True),
        }

    @staticmethod
    def should_return_not_modified(if_none_match: Optional[str], etag: Optional[str]) -> bool:
        """True iff the client's If-None-Match exactly equals the computed ETag."""
        if if_none_match is None or etag is None:
            return False
        return if_none_match == etag
