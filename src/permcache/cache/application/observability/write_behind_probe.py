"""Observability probes for the write-behind cache.

Following Domain Oriented Observability, probes capture domain-significant
events and metrics without cluttering business logic with logging concerns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from permcache.shared_kernel.authorization.types import PendingOperation
    from permcache.shared_kernel.observability_context import ObservationContext


class WriteBehindCacheProbe(Protocol):
    """Protocol for write-behind cache observability.

    Implementations can log, emit metrics, or send traces.
    """

    def operation_enqueued(self, operation: PendingOperation, pending: int) -> None:
        """Called when a grant/revoke is buffered."""
        ...

    def operation_superseded(
        self, superseded: PendingOperation, replacement: PendingOperation
    ) -> None:
        """Called when a buffered operation is replaced by a later one."""
        ...

    def flush_requested(self, reason: str, pending: int) -> None:
        """Called when a size trigger asks the scheduler to flush."""
        ...

    def flush_coalesced(self, reason: str) -> None:
        """Called when a trigger is ignored because a flush is in flight."""
        ...

    def batch_flushed(self, writes: int, deletes: int, remaining: int) -> None:
        """Called when a batch is confirmed by the remote store."""
        ...

    def batch_failed(
        self, writes: int, deletes: int, dropped: int, error: Exception
    ) -> None:
        """Called when a batch send fails and its operations are dropped."""
        ...

    def flush_completed(self, writes: int, deletes: int, duration_ms: float) -> None:
        """Called when a flush finishes without errors."""
        ...

    def queue_cleared(self, discarded: int) -> None:
        """Called when pending operations are discarded without flushing."""
        ...

    def scheduler_started(self, flush_interval_seconds: float) -> None:
        """Called when the background flush loop starts."""
        ...

    def scheduler_stopped(self) -> None:
        """Called when the background flush loop stops."""
        ...

    def scheduler_error(self, error: Exception) -> None:
        """Called when a scheduled flush raises."""
        ...

    def with_context(self, context: ObservationContext) -> WriteBehindCacheProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultWriteBehindCacheProbe:
    """Default implementation using structlog.

    Logs all write-behind events with appropriate log levels.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger().bind(
            component="write_behind_cache"
        )
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultWriteBehindCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultWriteBehindCacheProbe(logger=self._logger, context=context)

    def operation_enqueued(self, operation: PendingOperation, pending: int) -> None:
        """Log a buffered operation."""
        self._logger.debug(
            "write_behind_operation_enqueued",
            kind=str(operation.kind),
            pending=pending,
            **operation.tuple.as_dict(),
            **self._get_context_kwargs(),
        )

    def operation_superseded(
        self, superseded: PendingOperation, replacement: PendingOperation
    ) -> None:
        """Log a buffered operation replaced by a later one."""
        self._logger.debug(
            "write_behind_operation_superseded",
            superseded_kind=str(superseded.kind),
            replacement_kind=str(replacement.kind),
            **replacement.tuple.as_dict(),
            **self._get_context_kwargs(),
        )

    def flush_requested(self, reason: str, pending: int) -> None:
        """Log a flush trigger."""
        self._logger.debug(
            "write_behind_flush_requested",
            reason=reason,
            pending=pending,
            **self._get_context_kwargs(),
        )

    def flush_coalesced(self, reason: str) -> None:
        """Log a trigger absorbed by an in-flight flush."""
        self._logger.debug(
            "write_behind_flush_coalesced",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def batch_flushed(self, writes: int, deletes: int, remaining: int) -> None:
        """Log a confirmed batch."""
        self._logger.info(
            "write_behind_batch_flushed",
            writes=writes,
            deletes=deletes,
            remaining=remaining,
            **self._get_context_kwargs(),
        )

    def batch_failed(
        self, writes: int, deletes: int, dropped: int, error: Exception
    ) -> None:
        """Log a failed batch whose operations were dropped."""
        self._logger.error(
            "write_behind_batch_failed",
            writes=writes,
            deletes=deletes,
            dropped=dropped,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def flush_completed(self, writes: int, deletes: int, duration_ms: float) -> None:
        """Log a completed flush."""
        if writes or deletes:
            self._logger.info(
                "write_behind_flush_completed",
                writes=writes,
                deletes=deletes,
                duration_ms=round(duration_ms, 2),
                **self._get_context_kwargs(),
            )

    def queue_cleared(self, discarded: int) -> None:
        """Log discarded pending operations."""
        self._logger.warning(
            "write_behind_queue_cleared",
            discarded=discarded,
            **self._get_context_kwargs(),
        )

    def scheduler_started(self, flush_interval_seconds: float) -> None:
        """Log scheduler start."""
        self._logger.info(
            "write_behind_scheduler_started",
            flush_interval_seconds=flush_interval_seconds,
            **self._get_context_kwargs(),
        )

    def scheduler_stopped(self) -> None:
        """Log scheduler stop."""
        self._logger.info(
            "write_behind_scheduler_stopped",
            **self._get_context_kwargs(),
        )

    def scheduler_error(self, error: Exception) -> None:
        """Log a scheduled flush error."""
        self._logger.warning(
            "write_behind_scheduler_error",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
