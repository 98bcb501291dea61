"""In-memory store of cache entries with TTL expiry.

The store is the only shared mutable state of the read-through cache. A
single lock guards the mapping and is never held across I/O.
"""

from __future__ import annotations

import itertools
import threading
import time
from collections.abc import Callable
from typing import Any

from permcache.cache.domain.entries import CacheEntry
from permcache.cache.domain.keys import CacheKey, ListCacheKey

Key = CacheKey | ListCacheKey


class InMemoryEntryStore:
    """Thread-safe mapping of cache keys to immutable entries.

    Fetches that are in flight are tracked per key. An invalidation that
    matches the key of an in-flight fetch marks it stale, and its result is
    discarded when it arrives.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store.

        Args:
            clock: Monotonic clock returning seconds, injectable for tests
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Key, CacheEntry[Any]] = {}
        self._tokens = itertools.count(1)
        self._in_flight: dict[int, Key] = {}
        self._stale: set[int] = set()

    def begin_fetch(self, key: Key) -> int:
        """Register a fetch for `key` and return its token for put()."""
        with self._lock:
            token = next(self._tokens)
            self._in_flight[token] = key
            return token

    def cancel_fetch(self, token: int) -> None:
        """Forget a fetch that produced no value."""
        with self._lock:
            self._in_flight.pop(token, None)
            self._stale.discard(token)

    def in_flight(self) -> int:
        """Number of fetches registered and not yet completed."""
        with self._lock:
            return len(self._in_flight)

    def get(self, key: Key) -> tuple[CacheEntry[Any] | None, bool]:
        """Look up a live entry.

        An expired entry is removed as part of the lookup.

        Returns:
            (entry, expired) where entry is None on a miss and expired tells
            whether the miss was caused by removing an expired entry
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if entry.is_expired(now):
                del self._entries[key]
                return None, True
            return entry, False

    def put(
        self,
        key: Key,
        value: Any,
        ttl: float,
        *,
        fetch: int | None = None,
    ) -> CacheEntry[Any] | None:
        """Store a value, replacing any existing entry for the key.

        When `fetch` is a token from begin_fetch() and an invalidation
        matched the key while the fetch was in flight, the value is
        discarded instead: it may predate the change that was invalidated.

        Returns:
            The stored entry, or None if the value was discarded
        """
        entry = CacheEntry(key=key, value=value, stored_at=self._clock(), ttl=ttl)
        with self._lock:
            if fetch is not None:
                self._in_flight.pop(fetch, None)
                if fetch in self._stale:
                    self._stale.discard(fetch)
                    return None
            self._entries[key] = entry
        return entry

    def remove_matching(
        self,
        user: str | None = None,
        relation: str | None = None,
        object: str | None = None,
        object_type: str | None = None,
    ) -> int:
        """Remove every entry whose key matches all supplied filters.

        In-flight fetches for matching keys are marked stale.

        Returns:
            Number of entries removed
        """

        def matches(key: Key) -> bool:
            return key.matches(
                user=user, relation=relation, object=object, object_type=object_type
            )

        with self._lock:
            self._stale.update(
                token for token, key in self._in_flight.items() if matches(key)
            )
            doomed = [key for key in self._entries if matches(key)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            doomed = [
                key for key, entry in self._entries.items() if entry.is_expired(now)
            ]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def clear(self) -> int:
        with self._lock:
            self._stale.update(self._in_flight)
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
