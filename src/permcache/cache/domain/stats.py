"""Aggregated cache statistics.

StatsRegistry holds the counters shared by the read-through cache, the
write-behind cache and the warmer. Counters only grow until reset().
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of cache counters."""

    hits: int = 0
    misses: int = 0
    flushed_writes: int = 0
    flushed_deletes: int = 0
    flush_errors: int = 0
    invalidations: int = 0
    expirations: int = 0
    warmed: int = 0

    @property
    def hit_rate(self) -> float:
        """Fraction of checks served from cache (0.0 with no activity)."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class StatsRegistry:
    """Thread-safe counters for cache activity."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats = CacheStats()

    def _add(self, **deltas: int) -> None:
        with self._lock:
            current = self._stats
            self._stats = replace(
                current,
                **{name: getattr(current, name) + delta for name, delta in deltas.items()},
            )

    def record_hit(self) -> None:
        self._add(hits=1)

    def record_miss(self) -> None:
        self._add(misses=1)

    def record_flushed(self, writes: int = 0, deletes: int = 0) -> None:
        self._add(flushed_writes=writes, flushed_deletes=deletes)

    def record_flush_error(self) -> None:
        self._add(flush_errors=1)

    def record_invalidations(self, count: int) -> None:
        if count:
            self._add(invalidations=count)

    def record_expirations(self, count: int) -> None:
        if count:
            self._add(expirations=count)

    def record_warmed(self, count: int) -> None:
        if count:
            self._add(warmed=count)

    def snapshot(self) -> CacheStats:
        """Return the current counters."""
        with self._lock:
            return self._stats

    def reset(self) -> None:
        """Reset every counter to zero."""
        with self._lock:
            self._stats = CacheStats()
