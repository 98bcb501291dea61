"""permcache - caching and write-buffering core for relationship-based authorization.

Sits between application code and a remote authorization service:

- ``ReadThroughCache`` serves permission checks from a local TTL cache.
- ``WriteBehindCache`` buffers grants/revokes and flushes them in batches.
- ``CacheWarmer`` invalidates and pre-populates cache entries.
- ``CacheManagement`` exposes status, flush, clear and stats to operators.

Use ``permcache.infrastructure.dependencies.build_permission_cache`` to wire
all components against an ``AuthorizationClient``.
"""

__version__ = "0.1.0"
