"""Protocol for cache warmer observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from permcache.shared_kernel.observability_context import ObservationContext


class CacheWarmerProbe(Protocol):
    """Domain probe for cache warming."""

    def cache_warmed(self, strategy: str, requested: int, warmed: int) -> None:
        """Record that a warm run finished."""
        ...

    def warm_check_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a single warming check failed and was skipped."""
        ...

    def with_context(self, context: ObservationContext) -> CacheWarmerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCacheWarmerProbe:
    """Default implementation of CacheWarmerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultCacheWarmerProbe:
        """Create a new probe with observation context bound."""
        return DefaultCacheWarmerProbe(logger=self._logger, context=context)

    def cache_warmed(self, strategy: str, requested: int, warmed: int) -> None:
        """Record that a warm run finished."""
        self._logger.info(
            "permission_cache_warmed",
            strategy=strategy,
            requested=requested,
            warmed=warmed,
            **self._get_context_kwargs(),
        )

    def warm_check_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a single warming check failed and was skipped."""
        self._logger.warning(
            "permission_cache_warm_check_failed",
            user=user,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
