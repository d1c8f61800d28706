"""Running cache counters and derived metrics."""

import threading
from typing import Any, Dict

from .sizing import format_bytes


class StatsCollector:
    """Monotonic hit/miss/set/delete counters for the life of the process."""

    def __init__(self):
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.evictions = 0
        self.expirations = 0

    def record_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def record_set(self) -> None:
        with self._lock:
            self.sets += 1

    def record_delete(self, count: int = 1) -> None:
        with self._lock:
            self.deletes += count

    def record_eviction(self) -> None:
        with self._lock:
            self.evictions += 1

    def record_expiration(self, count: int = 1) -> None:
        with self._lock:
            self.expirations += count

    def counters(self) -> Dict[str, int]:
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "sets": self.sets,
                "deletes": self.deletes,
                "evictions": self.evictions,
                "expirations": self.expirations,
            }

    def snapshot(self, memory_usage: int, max_memory_size: int, cache_size: int) -> Dict[str, Any]:
        """Counters plus formatted hit rate and memory utilization."""
        counters = self.counters()
        hit_rate = hit_rate_percent(counters["hits"], counters["misses"])

        return {
            **counters,
            "hitRate": f"{hit_rate:.2f}%",
            "memoryUsage": {
                "current": format_bytes(memory_usage),
                "max": format_bytes(max_memory_size),
                "percentage": f"{memory_utilization_percent(memory_usage, max_memory_size):.2f}%",
            },
            "cacheSize": cache_size,
        }


def hit_rate_percent(hits: int, misses: int) -> float:
    """Hits over lookups as a percentage, 0.0 before the first lookup."""
    lookups = hits + misses
    if lookups == 0:
        return 0.0
    return hits / lookups * 100


def memory_utilization_percent(memory_usage: int, max_memory_size: int) -> float:
    if max_memory_size <= 0:
        return 0.0
    return memory_usage / max_memory_size * 100
