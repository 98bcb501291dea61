"""Cache invalidation and warming.

The warmer pre-populates the read-through cache by issuing checks through
it, so warmed entries are always answers the authorization service
actually gave.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from permcache.cache.application.observability import (
    CacheWarmerProbe,
    DefaultCacheWarmerProbe,
)
from permcache.shared_kernel.authorization.exceptions import AuthorizationError
from permcache.shared_kernel.authorization.types import TupleKey, object_type_of

if TYPE_CHECKING:
    from permcache.cache.application.read_through import ReadThroughCache
    from permcache.cache.ports import ActivityLog


class CacheWarmer:
    """Evicts and pre-populates read-through cache entries.

    Checks are issued one at a time. A check that fails is skipped and
    reported through the probe; it never aborts the rest of the run.
    """

    def __init__(
        self,
        read_cache: ReadThroughCache,
        activity_log: ActivityLog | None = None,
        probe: CacheWarmerProbe | None = None,
    ) -> None:
        self._read_cache = read_cache
        self._activity_log = activity_log
        self._probe = probe or DefaultCacheWarmerProbe()

    def invalidate(
        self,
        user: str | None = None,
        relation: str | None = None,
        object: str | None = None,
    ) -> int:
        """Remove matching entries from the read-through cache.

        Returns:
            Number of entries removed
        """
        return self._read_cache.invalidate(user=user, relation=relation, object=object)

    async def warm_batch(
        self,
        users: Sequence[str],
        relations: Sequence[str],
        objects: Sequence[str],
    ) -> int:
        """Check every (user, relation, object) combination.

        Large cross products are slow; callers are expected to chunk.

        Returns:
            How many of the combinations are cached afterwards
        """
        tuples = [
            TupleKey(user, relation, object)
            for user, object, relation in itertools.product(users, objects, relations)
        ]
        return await self._warm("batch", tuples)

    async def warm_for_user(
        self,
        user: str,
        relations: Sequence[str],
        objects: Sequence[str],
    ) -> int:
        """Check every relation on every object for a single user.

        Returns:
            How many of the combinations are cached afterwards
        """
        tuples = [
            TupleKey(user, relation, object)
            for object, relation in itertools.product(objects, relations)
        ]
        return await self._warm("user", tuples)

    async def warm_from_activity(self, limit: int = 1000) -> int:
        """Warm the most frequently checked tuples from the activity log.

        Returns:
            How many of those tuples are cached afterwards, or 0 when no
            activity log is configured
        """
        if self._activity_log is None or limit <= 0:
            return 0
        tuples = self._activity_log.recent_checks(limit)
        return await self._warm("activity", tuples)

    async def warm_related(
        self,
        user: str,
        source_object: str,
        relations: Sequence[str],
    ) -> int:
        """Warm checks on every object of the source object's type.

        Objects are discovered with one list-objects query per relation;
        every relation is then checked on every discovered object.

        Returns:
            How many of those checks are cached afterwards
        """
        object_type = object_type_of(source_object)
        discovered: dict[str, None] = {}
        for relation in relations:
            try:
                listing = await self._read_cache.list_objects(
                    user, relation, object_type
                )
            except AuthorizationError as e:
                self._probe.warm_check_failed(user, relation, object_type, e)
                continue
            discovered.update(dict.fromkeys(listing.objects))

        tuples = [
            TupleKey(user, relation, object)
            for object, relation in itertools.product(discovered, relations)
        ]
        return await self._warm("related", tuples)

    async def _warm(self, strategy: str, tuples: Iterable[TupleKey]) -> int:
        requested = warmed = 0
        for tuple_key in tuples:
            requested += 1
            try:
                cached = await self._read_cache.warm(
                    tuple_key.user, tuple_key.relation, tuple_key.object
                )
            except AuthorizationError as e:
                self._probe.warm_check_failed(
                    tuple_key.user, tuple_key.relation, tuple_key.object, e
                )
                continue
            if cached:
                warmed += 1

        self._read_cache.stats.record_warmed(warmed)
        self._probe.cache_warmed(strategy, requested=requested, warmed=warmed)
        return warmed
