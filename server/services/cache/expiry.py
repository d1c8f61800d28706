"""TTL predicates for cache entries."""

from models.cache import CacheEntry


def compute_expires_at(created_at: float, ttl_ms: float) -> float:
    """Absolute deadline for an entry created at ``created_at``."""
    return created_at + ttl_ms


def is_expired(entry: CacheEntry, now: float) -> bool:
    """True once ``now`` is strictly past the entry's deadline.

    An entry is still valid at the exact millisecond of ``expires_at``.
    A non-positive TTL means "expire instantly": such an entry is expired
    at its next observation even if the clock has not moved.
    """
    if entry.ttl_ms <= 0:
        return True
    return now > entry.expires_at
