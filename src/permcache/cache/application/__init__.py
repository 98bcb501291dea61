"""Application services for the permission cache.

The read-through cache answers checks, the write-behind cache buffers
grants and revokes, the warmer pre-populates entries and the management
facade exposes operator actions over all of them.
"""

from permcache.cache.application.management import CacheManagement
from permcache.cache.application.read_through import ReadThroughCache
from permcache.cache.application.warmer import CacheWarmer
from permcache.cache.application.write_behind import (
    WriteBehindCache,
    WriteBehindState,
)

__all__ = [
    "CacheManagement",
    "CacheWarmer",
    "ReadThroughCache",
    "WriteBehindCache",
    "WriteBehindState",
]
