"""Least-recently-used victim selection.

The engine keeps keys in access order (oldest first) in an OrderedDict, so
picking the victim is O(1) instead of a scan for the smallest
``last_accessed_at``. Keys touched in the same millisecond keep the order in
which they were touched, which makes eviction order deterministic.
"""

from collections import OrderedDict
from typing import Dict, Iterator, Optional

from models.cache import CacheEntry


class LRUEvictionEngine:
    """Tracks access recency and evicts the least recently accessed entry.

    The engine is not thread-safe on its own; CacheStore calls it only while
    holding its lock.
    """

    def __init__(self):
        self._order: "OrderedDict[str, None]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        """Iterate keys from least to most recently accessed."""
        return iter(self._order)

    def record_insert(self, key: str) -> None:
        """Register a new (or replaced) key as the most recently accessed."""
        self._order[key] = None
        self._order.move_to_end(key)

    def record_access(self, key: str) -> None:
        """Move a key to the most recently accessed position."""
        if key in self._order:
            self._order.move_to_end(key)

    def discard(self, key: str) -> None:
        """Forget a key removed by delete, expiry or invalidation."""
        self._order.pop(key, None)

    def clear(self) -> None:
        self._order.clear()

    def select_victim(self) -> Optional[str]:
        """Key with the oldest access, or None when nothing is tracked."""
        return next(iter(self._order), None)

    def evict_one(self, entries: Dict[str, CacheEntry]) -> Optional[CacheEntry]:
        """Remove the least recently accessed entry from ``entries``.

        Returns the removed entry so the caller can release its size, or
        None when the store is empty.
        """
        while self._order:
            key, _ = self._order.popitem(last=False)
            entry = entries.pop(key, None)
            if entry is not None:
                return entry
        return None
