"""Cache domain layer: keys, entries, statistics and result value objects.

Pure in-memory types with no knowledge of remote clients, scheduling or
logging.
"""

from permcache.cache.domain.entries import CacheEntry
from permcache.cache.domain.exceptions import (
    CacheError,
    ClearNotConfirmedError,
    FlushError,
    InvalidConfigurationError,
)
from permcache.cache.domain.keys import CacheKey, ListCacheKey, hash_context
from permcache.cache.domain.stats import CacheStats, StatsRegistry
from permcache.cache.domain.value_objects import (
    CacheStatsView,
    CheckResult,
    DrainedBatch,
    FlushResult,
    ListObjectsResult,
    PendingCounts,
    PendingSnapshot,
    WriteBehindStatus,
)

__all__ = [
    "CacheEntry",
    "CacheError",
    "CacheKey",
    "CacheStats",
    "CacheStatsView",
    "CheckResult",
    "ClearNotConfirmedError",
    "DrainedBatch",
    "FlushError",
    "FlushResult",
    "InvalidConfigurationError",
    "ListCacheKey",
    "ListObjectsResult",
    "PendingCounts",
    "PendingSnapshot",
    "StatsRegistry",
    "WriteBehindStatus",
    "hash_context",
]
