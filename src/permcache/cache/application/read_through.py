"""Read-through cache for permission checks.

Serves checks from a local TTL cache and transparently fetches from the
authorization service on a miss. Failed fetches are never cached.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from permcache.cache.application.observability import (
    DefaultReadThroughCacheProbe,
    ReadThroughCacheProbe,
)
from permcache.cache.domain.exceptions import InvalidConfigurationError
from permcache.cache.domain.keys import CacheKey, ListCacheKey, hash_context
from permcache.cache.domain.stats import CacheStats, StatsRegistry
from permcache.cache.domain.value_objects import CheckResult, ListObjectsResult
from permcache.cache.infrastructure.entry_store import InMemoryEntryStore
from permcache.shared_kernel.authorization.types import TupleKey
from permcache.shared_kernel.observability_context import ObservationContext

if TYPE_CHECKING:
    from permcache.cache.ports import ActivityLog
    from permcache.shared_kernel.authorization.protocols import AuthorizationClient

DEFAULT_CONNECTION = "default"


class ReadThroughCache:
    """Caches permission checks keyed by connection, tuple and context hash.

    The entry store lock is only held for in-memory work: a miss releases it
    before calling the remote service, so concurrent hits are never blocked
    by a slow fetch. Two concurrent misses for the same key may both fetch;
    the later result replaces the earlier entry wholesale. A fetched result
    is not stored if an invalidation matching its key ran while it was in
    flight.
    """

    def __init__(
        self,
        client: AuthorizationClient,
        ttl: timedelta = timedelta(seconds=300),
        *,
        connection: str = DEFAULT_CONNECTION,
        connections: Mapping[str, AuthorizationClient] | None = None,
        store: InMemoryEntryStore | None = None,
        stats: StatsRegistry | None = None,
        activity_log: ActivityLog | None = None,
        probe: ReadThroughCacheProbe | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            client: Authorization client for the default connection
            ttl: Lifetime of cached results
            connection: Name of the default connection
            connections: Additional named connections
            store: Entry store (a fresh in-memory store by default)
            stats: Shared statistics registry
            activity_log: Optional log that records every checked tuple
            probe: Domain probe for observability
        """
        self._default_connection = connection
        self._clients: dict[str, AuthorizationClient] = {connection: client}
        self._clients.update(connections or {})
        self._ttl = ttl.total_seconds()
        self._store = store if store is not None else InMemoryEntryStore()
        self._stats = stats if stats is not None else StatsRegistry()
        self._activity_log = activity_log
        self._probe = probe or DefaultReadThroughCacheProbe()
        self._probes: dict[str, ReadThroughCacheProbe] = {
            name: self._probe.with_context(ObservationContext(connection=name))
            for name in self._clients
        }

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self._ttl)

    @property
    def stats(self) -> StatsRegistry:
        return self._stats

    async def check(
        self,
        user: str,
        relation: str,
        object: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
        connection: str | None = None,
    ) -> CheckResult:
        """Check a permission, serving from cache when possible.

        Args:
            user: Subject identifier (e.g., "user:alice")
            relation: Relation or permission (e.g., "viewer")
            object: Object identifier (e.g., "document:readme")
            contextual_tuples: Tuples considered only for this check
            context: Condition/caveat context for this check
            connection: Named connection (default connection when None)

        Returns:
            CheckResult with the decision and whether it came from cache

        Raises:
            InvalidConfigurationError: If the connection is unknown
            RemoteUnavailableError: If the remote check fails (not cached)
        """
        connection = connection or self._default_connection
        client = self._client_for(connection)
        probe = self._probes[connection]
        key = CacheKey.for_check(
            connection, user, relation, object, contextual_tuples, context
        )

        if self._activity_log is not None:
            self._activity_log.record(TupleKey(user, relation, object))

        entry, expired = self._store.get(key)
        if expired:
            self._stats.record_expirations(1)
        if entry is not None:
            self._stats.record_hit()
            probe.cache_hit(user=user, relation=relation, object=object)
            return CheckResult(allowed=entry.value, from_cache=True)

        self._stats.record_miss()
        probe.cache_miss(
            user=user, relation=relation, object=object, expired=expired
        )
        allowed = await self._fetch_check(client, key, contextual_tuples, context)
        return CheckResult(allowed=allowed, from_cache=False)

    async def warm(
        self,
        user: str,
        relation: str,
        object: str,
        connection: str | None = None,
    ) -> bool:
        """Populate the context-free entry for a tuple unless it is cached.

        Warming is not recorded in the activity log and does not count as a
        hit or a miss.

        Returns:
            True if a live entry exists afterwards

        Raises:
            InvalidConfigurationError: If the connection is unknown
            RemoteUnavailableError: If the remote check fails (not cached)
        """
        connection = connection or self._default_connection
        client = self._client_for(connection)
        key = CacheKey(
            connection=connection, user=user, relation=relation, object=object
        )

        entry, expired = self._store.get(key)
        if expired:
            self._stats.record_expirations(1)
        if entry is None:
            await self._fetch_check(client, key, (), None)
        return self.contains(user, relation, object, connection)

    async def list_objects(
        self,
        user: str,
        relation: str,
        object_type: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
        connection: str | None = None,
    ) -> ListObjectsResult:
        """List objects of a type, serving from cache when possible.

        Raises:
            InvalidConfigurationError: If the connection is unknown
            RemoteUnavailableError: If the remote lookup fails (not cached)
        """
        connection = connection or self._default_connection
        client = self._client_for(connection)
        probe = self._probes[connection]
        key = ListCacheKey(
            connection=connection,
            user=user,
            relation=relation,
            object_type=object_type,
            context_hash=hash_context(contextual_tuples, context),
        )

        entry, expired = self._store.get(key)
        if expired:
            self._stats.record_expirations(1)
        if entry is not None:
            self._stats.record_hit()
            probe.cache_hit(user=user, relation=relation, object=object_type)
            return ListObjectsResult(objects=entry.value, from_cache=True)

        self._stats.record_miss()
        probe.cache_miss(
            user=user, relation=relation, object=object_type, expired=expired
        )
        fetch = self._store.begin_fetch(key)
        try:
            objects = await client.list_objects(
                user,
                relation,
                object_type,
                contextual_tuples=contextual_tuples,
                context=context,
            )
        except Exception as e:
            probe.fetch_failed(
                user=user, relation=relation, object=object_type, error=e
            )
            raise
        else:
            value = tuple(objects)
            self._store.put(key, value, self._ttl, fetch=fetch)
        finally:
            self._store.cancel_fetch(fetch)
        return ListObjectsResult(objects=value, from_cache=False)

    def contains(
        self,
        user: str,
        relation: str,
        object: str,
        connection: str | None = None,
    ) -> bool:
        """Return True if a live context-free entry exists for the tuple.

        Does not affect hit/miss statistics.
        """
        key = CacheKey(
            connection=connection or self._default_connection,
            user=user,
            relation=relation,
            object=object,
        )
        entry, expired = self._store.get(key)
        if expired:
            self._stats.record_expirations(1)
        return entry is not None

    def invalidate(
        self,
        user: str | None = None,
        relation: str | None = None,
        object: str | None = None,
        *,
        object_type: str | None = None,
    ) -> int:
        """Remove every entry matching all supplied filters.

        Omitted filters act as wildcards; with no filters every entry is
        removed. Entries of every connection and context hash match.

        Args:
            user: Subject identifier to match
            relation: Relation to match
            object: Object identifier to match (listings match on its type)
            object_type: Object type to match

        Returns:
            Number of entries removed
        """
        removed = self._store.remove_matching(
            user=user,
            relation=relation,
            object=object,
            object_type=object_type,
        )
        self._stats.record_invalidations(removed)
        self._probe.entries_invalidated(
            count=removed, user=user, relation=relation, object=object
        )
        return removed

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        removed = self._store.purge_expired()
        self._stats.record_expirations(removed)
        self._probe.entries_expired(removed)
        return removed

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed
        """
        return self.invalidate()

    def get_stats(self) -> CacheStats:
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        self._stats.reset()

    def __len__(self) -> int:
        return len(self._store)

    async def _fetch_check(
        self,
        client: AuthorizationClient,
        key: CacheKey,
        contextual_tuples: Sequence[TupleKey],
        context: Mapping[str, Any] | None,
    ) -> bool:
        """Ask the remote service and cache the answer.

        The answer is not cached if the key was invalidated while the
        request was in flight.
        """
        fetch = self._store.begin_fetch(key)
        try:
            allowed = bool(
                await client.check(
                    key.user,
                    key.relation,
                    key.object,
                    contextual_tuples=contextual_tuples,
                    context=context,
                )
            )
        except Exception as e:
            self._probes[key.connection].fetch_failed(
                user=key.user, relation=key.relation, object=key.object, error=e
            )
            raise
        else:
            self._store.put(key, allowed, self._ttl, fetch=fetch)
        finally:
            # No-op once put() has consumed the token
            self._store.cancel_fetch(fetch)
        return allowed

    def _client_for(self, connection: str) -> AuthorizationClient:
        try:
            return self._clients[connection]
        except KeyError:
            raise InvalidConfigurationError(
                f"Unknown authorization connection: {connection!r}"
            ) from None
