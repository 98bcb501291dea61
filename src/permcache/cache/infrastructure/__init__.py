"""In-memory infrastructure for the cache context."""

from permcache.cache.infrastructure.activity_log import InMemoryActivityLog
from permcache.cache.infrastructure.entry_store import InMemoryEntryStore
from permcache.cache.infrastructure.pending_queue import PendingOperationQueue

__all__ = [
    "InMemoryActivityLog",
    "InMemoryEntryStore",
    "PendingOperationQueue",
]
