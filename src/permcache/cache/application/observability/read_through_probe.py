"""Protocol for read-through cache observability.

Defines the interface for domain probes that capture cache lookups,
remote fetches and invalidations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from permcache.shared_kernel.observability_context import ObservationContext


class ReadThroughCacheProbe(Protocol):
    """Domain probe for read-through cache operations."""

    def cache_hit(self, user: str, relation: str, object: str) -> None:
        """Record that a check was served from cache."""
        ...

    def cache_miss(
        self,
        user: str,
        relation: str,
        object: str,
        expired: bool,
    ) -> None:
        """Record that a check had to be fetched remotely."""
        ...

    def fetch_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a remote fetch failed (nothing was cached)."""
        ...

    def entries_invalidated(
        self,
        count: int,
        user: str | None,
        relation: str | None,
        object: str | None,
    ) -> None:
        """Record that entries were invalidated."""
        ...

    def entries_expired(self, count: int) -> None:
        """Record that expired entries were purged."""
        ...

    def with_context(self, context: ObservationContext) -> ReadThroughCacheProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReadThroughCacheProbe:
    """Default implementation of ReadThroughCacheProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultReadThroughCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultReadThroughCacheProbe(logger=self._logger, context=context)

    def cache_hit(self, user: str, relation: str, object: str) -> None:
        """Record that a check was served from cache."""
        self._logger.debug(
            "permission_cache_hit",
            user=user,
            relation=relation,
            object=object,
            **self._get_context_kwargs(),
        )

    def cache_miss(
        self,
        user: str,
        relation: str,
        object: str,
        expired: bool,
    ) -> None:
        """Record that a check had to be fetched remotely."""
        self._logger.debug(
            "permission_cache_miss",
            user=user,
            relation=relation,
            object=object,
            expired=expired,
            **self._get_context_kwargs(),
        )

    def fetch_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a remote fetch failed."""
        self._logger.warning(
            "permission_cache_fetch_failed",
            user=user,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def entries_invalidated(
        self,
        count: int,
        user: str | None,
        relation: str | None,
        object: str | None,
    ) -> None:
        """Record that entries were invalidated."""
        self._logger.debug(
            "permission_cache_invalidated",
            count=count,
            user=user,
            relation=relation,
            object=object,
            **self._get_context_kwargs(),
        )

    def entries_expired(self, count: int) -> None:
        """Record that expired entries were purged."""
        if count > 0:
            self._logger.debug(
                "permission_cache_expired_purged",
                count=count,
                **self._get_context_kwargs(),
            )
