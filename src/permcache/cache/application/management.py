"""Operator-facing management of the permission cache.

Thin facade used by CLIs and admin endpoints: inspect pending work, force a
flush, discard the buffer and read hit statistics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from permcache.cache.domain.exceptions import ClearNotConfirmedError
from permcache.cache.domain.value_objects import (
    CacheStatsView,
    FlushResult,
    WriteBehindStatus,
)

if TYPE_CHECKING:
    from permcache.cache.application.read_through import ReadThroughCache
    from permcache.cache.application.write_behind import WriteBehindCache


class CacheManagement:
    """Management operations over a read-through/write-behind pair."""

    def __init__(
        self,
        read_cache: ReadThroughCache,
        write_behind: WriteBehindCache,
    ) -> None:
        self._read_cache = read_cache
        self._write_behind = write_behind

    def status(self, recent_limit: int = 5) -> WriteBehindStatus:
        """Pending counts, configuration and the most recent operations.

        Raises:
            InvalidConfigurationError: If write-behind is disabled
        """
        return self._write_behind.status(recent_limit)

    async def flush(self) -> FlushResult:
        """Flush pending operations now.

        An empty buffer is not an error: a zero-count result is returned.

        Raises:
            InvalidConfigurationError: If write-behind is disabled
            FlushError: If a batch failed
        """
        return await self._write_behind.flush()

    def clear(self, confirmed: bool = False) -> int:
        """Discard every pending operation.

        Args:
            confirmed: Must be True; discarded operations are never sent

        Returns:
            Number of operations discarded

        Raises:
            ClearNotConfirmedError: If not confirmed
            InvalidConfigurationError: If write-behind is disabled
        """
        if not confirmed:
            pending = self._write_behind.get_pending_count().total
            raise ClearNotConfirmedError(
                f"Refusing to discard {pending} pending operation(s) without "
                "confirmation"
            )
        return self._write_behind.clear()

    def cache_stats(self) -> CacheStatsView:
        stats = self._read_cache.get_stats()
        return CacheStatsView(
            hits=stats.hits,
            misses=stats.misses,
            hit_rate=stats.hit_rate,
        )

    def reset_stats(self) -> None:
        self._read_cache.reset_stats()
