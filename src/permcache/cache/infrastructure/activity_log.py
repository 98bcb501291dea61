"""In-memory activity log of checked tuples.

Tracks how often each tuple is checked so the warmer can re-populate the
hottest entries after an invalidation or restart.
"""

from __future__ import annotations

import threading
from collections import OrderedDict

from permcache.shared_kernel.authorization.types import TupleKey


class InMemoryActivityLog:
    """Bounded frequency counter of checked tuples.

    Tuples are ranked by check count, ties broken by most recent check.
    When more than `capacity` distinct tuples have been seen, the least
    recently checked one is forgotten.
    """

    def __init__(self, capacity: int = 10_000) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._lock = threading.Lock()
        # Ordered least to most recently checked
        self._counts: OrderedDict[TupleKey, int] = OrderedDict()

    def record(self, tuple_key: TupleKey) -> None:
        with self._lock:
            self._counts[tuple_key] = self._counts.pop(tuple_key, 0) + 1
            if len(self._counts) > self._capacity:
                self._counts.popitem(last=False)

    def recent_checks(self, limit: int) -> list[TupleKey]:
        if limit <= 0:
            return []
        with self._lock:
            by_recency = list(reversed(self._counts.items()))
        # sorted() is stable, so equal counts keep most-recent-first order
        ranked = sorted(by_recency, key=lambda item: item[1], reverse=True)
        return [tuple_key for tuple_key, _ in ranked[:limit]]

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)
