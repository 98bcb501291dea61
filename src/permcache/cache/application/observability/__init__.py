"""Domain probes for the cache application services."""

from permcache.cache.application.observability.read_through_probe import (
    DefaultReadThroughCacheProbe,
    ReadThroughCacheProbe,
)
from permcache.cache.application.observability.warmer_probe import (
    CacheWarmerProbe,
    DefaultCacheWarmerProbe,
)
from permcache.cache.application.observability.write_behind_probe import (
    DefaultWriteBehindCacheProbe,
    WriteBehindCacheProbe,
)

__all__ = [
    "CacheWarmerProbe",
    "DefaultCacheWarmerProbe",
    "DefaultReadThroughCacheProbe",
    "DefaultWriteBehindCacheProbe",
    "ReadThroughCacheProbe",
    "WriteBehindCacheProbe",
]
