"""Wiring of the permission cache components.

build_permission_cache() assembles a read-through cache, write-behind cache,
warmer and management facade that share one statistics registry and one
activity log.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from permcache.cache.application import (
    CacheManagement,
    CacheWarmer,
    ReadThroughCache,
    WriteBehindCache,
)
from permcache.cache.domain.stats import StatsRegistry
from permcache.cache.infrastructure import InMemoryActivityLog
from permcache.infrastructure.settings import (
    CacheSettings,
    get_cache_settings,
    get_spicedb_settings,
)
from permcache.shared_kernel.authorization.protocols import AuthorizationClient
from permcache.shared_kernel.authorization.spicedb import SpiceDBAuthorizationClient


@dataclass(frozen=True)
class PermissionCache:
    """The assembled cache components."""

    read_cache: ReadThroughCache
    write_behind: WriteBehindCache
    warmer: CacheWarmer
    management: CacheManagement
    stats: StatsRegistry
    activity_log: InMemoryActivityLog


def get_spicedb_client() -> SpiceDBAuthorizationClient:
    """Get a SpiceDB authorization client configured from settings.

    The gRPC channel is opened lazily on first use.
    """
    settings = get_spicedb_settings()
    return SpiceDBAuthorizationClient(
        endpoint=settings.endpoint,
        preshared_key=settings.preshared_key.get_secret_value(),
        use_tls=settings.use_tls,
        cert_path=settings.cert_path,
    )


def build_permission_cache(
    client: AuthorizationClient | None = None,
    settings: CacheSettings | None = None,
    *,
    connections: Mapping[str, AuthorizationClient] | None = None,
    activity_log_capacity: int = 10_000,
) -> PermissionCache:
    """Assemble the cache components around an authorization client.

    Args:
        client: Client for the default connection (SpiceDB from settings
            when None)
        settings: Cache settings (loaded from the environment when None)
        connections: Additional named connections for the read-through cache
        activity_log_capacity: Distinct tuples kept by the activity log

    Returns:
        PermissionCache holding every component
    """
    if client is None:
        client = get_spicedb_client()
    if settings is None:
        settings = get_cache_settings()

    stats = StatsRegistry()
    activity_log = InMemoryActivityLog(capacity=activity_log_capacity)
    read_cache = ReadThroughCache(
        client,
        settings.ttl,
        connections=connections,
        stats=stats,
        activity_log=activity_log,
    )
    write_behind = WriteBehindCache(client, read_cache, settings, stats=stats)

    return PermissionCache(
        read_cache=read_cache,
        write_behind=write_behind,
        warmer=CacheWarmer(read_cache, activity_log=activity_log),
        management=CacheManagement(read_cache, write_behind),
        stats=stats,
        activity_log=activity_log,
    )
