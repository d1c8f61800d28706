"""Bounded in-memory cache store.

The store is the authoritative key -> entry map and the memory-budget
enforcer. Every public operation is a synchronous critical section under a
single re-entrant lock, so the store can be shared between the event loop
and worker threads without leaving the map and the running size out of sync.

Invariants held after every public call returns:
- ``memory_usage == sum(entry.size_bytes for entry in entries)``
- ``memory_usage <= max_memory_size``
"""

import copy
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from core.logging import get_logger, log_cache_operation
from models.cache import CacheEntry
from .eviction import LRUEvictionEngine
from .expiry import compute_expires_at, is_expired
from .sizing import JsonSizeEstimator
from .stats import StatsCollector

logger = get_logger(__name__)

DEFAULT_TTL_MS = 300000  # 5 minutes
DEFAULT_MAX_MEMORY_SIZE = 100 * 1024 * 1024  # 100MB
DEFAULT_MAX_ENTRY_RATIO = 0.1


def _now_ms() -> float:
    return time.time() * 1000


class CacheStore:
    """LRU memory cache with per-entry TTL and size-based admission."""

    def __init__(self,
                 max_memory_size: int = DEFAULT_MAX_MEMORY_SIZE,
                 max_entry_ratio: float = DEFAULT_MAX_ENTRY_RATIO,
                 default_ttl_ms: float = DEFAULT_TTL_MS,
                 size_estimator: Optional[Callable[[Any], int]] = None,
                 eviction: Optional[LRUEvictionEngine] = None,
                 stats: Optional[StatsCollector] = None,
                 clock: Optional[Callable[[], float]] = None):
        """Initialize the store.

        Args:
            max_memory_size: Memory budget in bytes
            max_entry_ratio: Largest admitted entry as a fraction of the budget
            default_ttl_ms: TTL applied when set() is called without one
            size_estimator: Callable returning the serialized size of a value
            eviction: LRU engine tracking access order
            stats: Counter sink, shared with whoever reports statistics
            clock: Millisecond clock, injectable for tests
        """
        if max_memory_size <= 0:
            raise ValueError("max_memory_size must be positive")

        self.max_memory_size = max_memory_size
        self.max_entry_size = max_memory_size * max_entry_ratio
        self.default_ttl_ms = default_ttl_ms
        self.size_estimator = size_estimator or JsonSizeEstimator()
        self.eviction = eviction or LRUEvictionEngine()
        self.stats = stats or StatsCollector()
        self.clock = clock or _now_ms

        self._entries: Dict[str, CacheEntry] = {}
        self._memory_usage = 0
        self._lock = threading.RLock()

    @property
    def memory_usage(self) -> int:
        """Bytes currently accounted to stored entries."""
        return self._memory_usage

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        """Membership test without touching LRU order, TTL or stats."""
        return key in self._entries

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the raw entry without side effects (no expiry, no stats)."""
        return self._entries.get(key)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss.

        This is the only read path and the only place lazy expiration is
        applied: an expired entry is removed and reported as a miss. Hits
        return a copy, so the stored value never escapes the entry.
        """
        with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self.stats.record_miss()
                log_cache_operation(logger, "get", key, hit=False)
                return None

            now = self.clock()
            if is_expired(entry, now):
                self._remove(key)
                self.stats.record_miss()
                self.stats.record_expiration()
                log_cache_operation(logger, "get", key, hit=False, expired=True)
                return None

            entry.last_accessed_at = now
            self.eviction.record_access(key)
            self.stats.record_hit()
            log_cache_operation(logger, "get", key, hit=True)
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_ms: Optional[float] = None) -> bool:
        """Store a value, evicting least recently used entries as needed.

        Returns False without touching the store when the value is larger
        than the admission limit. Raises CacheSerializationError when the
        value cannot be serialized.
        """
        size = self.size_estimator(value)
        if ttl_ms is None:
            ttl_ms = self.default_ttl_ms

        if size > self.max_entry_size:
            logger.debug("Cache admission rejected",
                         cache_key=key, size=size, limit=self.max_entry_size)
            return False

        owned = copy.deepcopy(value)

        with self._lock:
            # Replace: the old entry's size is released before eviction runs
            if key in self._entries:
                self._remove(key)

            while self._memory_usage + size > self.max_memory_size and self._entries:
                if not self._evict_one():
                    break

            now = self.clock()
            self._entries[key] = CacheEntry(
                key=key,
                value=owned,
                size_bytes=size,
                created_at=now,
                last_accessed_at=now,
                ttl_ms=ttl_ms,
                expires_at=compute_expires_at(now, ttl_ms),
            )
            self.eviction.record_insert(key)
            self._memory_usage += size
            self.stats.record_set()

        log_cache_operation(logger, "set", key, ttl_ms=ttl_ms, size=size)
        return True

    def delete(self, key: str) -> bool:
        """Remove a key. Returns whether anything was removed."""
        with self._lock:
            removed = self._remove(key) is not None
            if removed:
                self.stats.record_delete()

        log_cache_operation(logger, "delete", key, deleted=removed)
        return removed

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every key containing ``pattern`` as a literal substring."""
        with self._lock:
            keys_to_delete = [key for key in self._entries if pattern in key]
            for key in keys_to_delete:
                self._remove(key)
            if keys_to_delete:
                self.stats.record_delete(len(keys_to_delete))
                self._reconcile_usage()

        log_cache_operation(logger, "invalidate_pattern", pattern, deleted=len(keys_to_delete))
        return len(keys_to_delete)

    def purge_expired(self, now: Optional[float] = None) -> int:
        """Active expiration: remove every expired entry in one pass."""
        with self._lock:
            if now is None:
                now = self.clock()

            expired = [key for key, entry in self._entries.items() if is_expired(entry, now)]
            released = 0
            for key in expired:
                entry = self._entries.pop(key)
                self.eviction.discard(key)
                released += entry.size_bytes

            if expired:
                self._memory_usage -= released
                self.stats.record_expiration(len(expired))
                self._reconcile_usage()

        return len(expired)

    def clear(self) -> int:
        """Drop every entry. Counters are left untouched."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self.eviction.clear()
            self._memory_usage = 0

        log_cache_operation(logger, "clear", "*", deleted=count)
        return count

    def _remove(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self.eviction.discard(key)
            self._memory_usage -= entry.size_bytes
        return entry

    def _evict_one(self) -> bool:
        victim = self.eviction.evict_one(self._entries)
        if victim is None:
            return False
        self._memory_usage -= victim.size_bytes
        self.stats.record_eviction()
        logger.debug("Cache entry evicted (LRU)",
                     cache_key=victim.key, size=victim.size_bytes)
        return True

    def _reconcile_usage(self) -> None:
        """Recompute the running total from the entries after bulk removals."""
        actual = sum(entry.size_bytes for entry in self._entries.values())
        if actual != self._memory_usage:
            logger.warning("Cache memory accounting drift repaired",
                           tracked=self._memory_usage, actual=actual)
            self._memory_usage = actual
