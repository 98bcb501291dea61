"""Cache entry value object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from permcache.cache.domain.keys import CacheKey, ListCacheKey

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """An immutable cached result.

    Entries are replaced wholesale on re-fetch and never updated in place.

    Attributes:
        key: The key the entry is stored under
        value: The cached result (bool for checks, tuple of ids for listings)
        stored_at: Monotonic clock reading when the entry was stored
        ttl: Lifetime in seconds
    """

    key: CacheKey | ListCacheKey
    value: V
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Return True once the entry has lived for its full TTL."""
        return now - self.stored_at >= self.ttl
