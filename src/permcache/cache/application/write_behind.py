"""Write-behind buffering of grants and revokes.

Grants and revokes are recorded in a pending queue and sent to the
authorization service in batches, either on demand or from a background
flush loop. Tuples are invalidated in the read-through cache once the
remote service has confirmed them.
"""

from __future__ import annotations

import asyncio
import time
from enum import StrEnum
from typing import TYPE_CHECKING

from permcache.cache.application.observability import (
    DefaultWriteBehindCacheProbe,
    WriteBehindCacheProbe,
)
from permcache.cache.domain.exceptions import FlushError, InvalidConfigurationError
from permcache.cache.domain.stats import StatsRegistry
from permcache.cache.domain.value_objects import (
    DrainedBatch,
    FlushResult,
    PendingCounts,
    PendingSnapshot,
    WriteBehindStatus,
)
from permcache.cache.infrastructure.pending_queue import PendingOperationQueue
from permcache.shared_kernel.authorization.exceptions import AuthorizationError
from permcache.shared_kernel.authorization.types import OperationKind, TupleKey

if TYPE_CHECKING:
    from collections.abc import Sequence

    from permcache.cache.application.read_through import ReadThroughCache
    from permcache.infrastructure.settings import CacheSettings
    from permcache.shared_kernel.authorization.protocols import AuthorizationClient


class WriteBehindState(StrEnum):
    """Lifecycle state of a write-behind cache."""

    DISABLED = "disabled"
    IDLE = "idle"
    FLUSHING = "flushing"


class WriteBehindCache:
    """Buffers tuple writes and deletes and flushes them in batches.

    grant() and revoke() only touch in-memory state and may be called from
    any thread. Flushing is asynchronous and serialized: at most one flush
    runs at a time, and triggers that arrive while one is running are
    absorbed by it.

    Delivery is at-most-once. A batch whose remote call fails is dropped and
    reported through FlushError; it is not retried.
    """

    def __init__(
        self,
        client: AuthorizationClient,
        read_cache: ReadThroughCache,
        settings: CacheSettings,
        *,
        queue: PendingOperationQueue | None = None,
        stats: StatsRegistry | None = None,
        probe: WriteBehindCacheProbe | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            client: Authorization client batches are sent to
            read_cache: Read-through cache invalidated after each batch
            settings: Cache settings (enabled, batch size, flush interval)
            queue: Pending operation queue (a fresh queue by default)
            stats: Shared statistics registry
            probe: Domain probe for observability
        """
        self._client = client
        self._read_cache = read_cache
        self._enabled = settings.enabled
        self._batch_size = settings.batch_size
        self._flush_interval = settings.flush_interval
        self._queue = queue if queue is not None else PendingOperationQueue()
        self._stats = stats if stats is not None else read_cache.stats
        self._probe = probe or DefaultWriteBehindCacheProbe()

        self._state = (
            WriteBehindState.IDLE if self._enabled else WriteBehindState.DISABLED
        )
        self._flush_lock = asyncio.Lock()
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wake: asyncio.Event | None = None

    @property
    def state(self) -> WriteBehindState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def is_running(self) -> bool:
        """True while the background flush loop is active."""
        return self._task is not None

    def grant(self, user: str, relation: str, object: str) -> None:
        """Buffer a tuple write.

        Raises:
            InvalidConfigurationError: If write-behind is disabled
            ValueError: If an identifier is malformed
        """
        self._ensure_enabled("grant")
        self._enqueue(OperationKind.WRITE, TupleKey(user, relation, object))

    def revoke(self, user: str, relation: str, object: str) -> None:
        """Buffer a tuple delete.

        Raises:
            InvalidConfigurationError: If write-behind is disabled
            ValueError: If an identifier is malformed
        """
        self._ensure_enabled("revoke")
        self._enqueue(OperationKind.DELETE, TupleKey(user, relation, object))

    async def flush(self) -> FlushResult:
        """Send every pending operation to the authorization service.

        Waits for an in-flight flush to finish, then drains what is left.

        Returns:
            Counts of writes and deletes confirmed by the remote service

        Raises:
            InvalidConfigurationError: If write-behind is disabled
            FlushError: If a batch failed; its operations were dropped and
                operations queued behind it are still pending
        """
        self._ensure_enabled("flush")
        async with self._flush_lock:
            return await self._flush_pending()

    def get_pending_count(self) -> PendingCounts:
        return self._queue.counts()

    def get_pending_operations(self, limit: int | None = None) -> PendingSnapshot:
        """Tuples currently pending, at most `limit` most recent per kind."""
        return self._queue.snapshot(limit)

    def clear(self) -> int:
        """Discard every pending operation without sending it.

        Returns:
            Number of operations discarded

        Raises:
            InvalidConfigurationError: If write-behind is disabled
        """
        self._ensure_enabled("clear")
        discarded = self._queue.clear()
        if discarded:
            self._probe.queue_cleared(discarded)
        return discarded

    def status(self, recent_limit: int = 5) -> WriteBehindStatus:
        """Summarize pending work and configuration.

        Args:
            recent_limit: Most recent operations to include

        Raises:
            InvalidConfigurationError: If write-behind is disabled
        """
        self._ensure_enabled("status")
        counts = self._queue.counts()
        return WriteBehindStatus(
            pending_writes=counts.writes,
            pending_deletes=counts.deletes,
            pending_total=counts.total,
            batch_size=self._batch_size,
            flush_interval=self._flush_interval,
            recent=self._queue.recent(recent_limit),
        )

    async def start(self) -> None:
        """Start the background flush loop on the running event loop.

        Calling start() on a running cache has no effect.

        Raises:
            InvalidConfigurationError: If write-behind is disabled
        """
        self._ensure_enabled("start")
        if self._task is not None:
            return

        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        self._running = True
        self._task = asyncio.create_task(
            self._flush_loop(), name="permcache-write-behind"
        )
        self._probe.scheduler_started(self._flush_interval.total_seconds())

    async def stop(self, drain: bool = True) -> FlushResult:
        """Stop the background flush loop.

        A flush that is already running is allowed to finish.

        Args:
            drain: Flush remaining operations once the loop has stopped

        Returns:
            Counts flushed by the final drain (zero when not draining)
        """
        task = self._task
        if task is not None:
            self._running = False
            if self._wake is not None:
                self._wake.set()
            await task
            self._task = None
            self._loop = None
            self._wake = None
            self._probe.scheduler_stopped()

        if drain and self._enabled and len(self._queue):
            return await self.flush()
        return FlushResult(writes=0, deletes=0)

    async def __aenter__(self) -> WriteBehindCache:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop(drain=True)

    def _ensure_enabled(self, operation: str) -> None:
        if not self._enabled:
            raise InvalidConfigurationError(
                f"Write-behind cache is disabled; cannot {operation}"
            )

    def _enqueue(self, kind: OperationKind, tuple_key: TupleKey) -> None:
        tuple_key.validate()
        operation, superseded = self._queue.enqueue(kind, tuple_key)
        pending = len(self._queue)
        if superseded is not None:
            self._probe.operation_superseded(superseded, operation)
        self._probe.operation_enqueued(operation, pending)
        if pending >= self._batch_size:
            self._request_flush("batch_size", pending)

    def _request_flush(self, reason: str, pending: int) -> None:
        """Wake the flush loop. Safe to call from any thread."""
        loop, wake = self._loop, self._wake
        if loop is None or wake is None or loop.is_closed():
            return
        self._probe.flush_requested(reason, pending)
        loop.call_soon_threadsafe(wake.set)

    async def _flush_loop(self) -> None:
        """Flush on every interval tick and whenever woken early."""
        interval = self._flush_interval.total_seconds()
        while self._running:
            assert self._wake is not None
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=interval)
                reason = "batch_size"
            except TimeoutError:
                reason = "interval"
            self._wake.clear()

            if not self._running:
                break
            await self._scheduled_flush(reason)

    async def _scheduled_flush(self, reason: str) -> None:
        if not len(self._queue):
            return
        if self._flush_lock.locked():
            self._probe.flush_coalesced(reason)
            return
        try:
            await self.flush()
        except Exception as e:
            # Keep ticking; a failed batch has already been counted
            self._probe.scheduler_error(e)

    async def _flush_pending(self) -> FlushResult:
        """Drain the queue batch by batch. Caller holds the flush lock."""
        self._state = WriteBehindState.FLUSHING
        started = time.perf_counter()
        writes = deletes = 0
        try:
            while True:
                batch = self._queue.drain_batch(self._batch_size)
                if not batch:
                    break

                sent_writes, sent_deletes, error = await self._send_batch(batch)
                writes += sent_writes
                deletes += sent_deletes
                self._stats.record_flushed(sent_writes, sent_deletes)

                if error is not None:
                    dropped = batch.size - sent_writes - sent_deletes
                    self._stats.record_flush_error()
                    self._probe.batch_failed(
                        writes=sent_writes,
                        deletes=sent_deletes,
                        dropped=dropped,
                        error=error,
                    )
                    raise FlushError(
                        f"Flush batch failed; dropped {dropped} operation(s): {error}",
                        writes=writes,
                        deletes=deletes,
                        failed_batches=1,
                        dropped=dropped,
                    ) from error

                self._probe.batch_flushed(
                    writes=sent_writes,
                    deletes=sent_deletes,
                    remaining=batch.remaining,
                )
        finally:
            self._state = WriteBehindState.IDLE

        duration_ms = (time.perf_counter() - started) * 1000
        self._probe.flush_completed(writes, deletes, duration_ms)
        return FlushResult(writes=writes, deletes=deletes)

    async def _send_batch(
        self, batch: DrainedBatch
    ) -> tuple[int, int, AuthorizationError | None]:
        """Send one batch, writes first.

        Only remote failures are caught; anything else propagates.

        Returns:
            (confirmed writes, confirmed deletes, remote error or None)
        """
        sent_writes = sent_deletes = 0
        try:
            if batch.writes:
                await self._client.write_tuples(batch.writes)
                self._invalidate(batch.writes)
                sent_writes = len(batch.writes)
            if batch.deletes:
                await self._client.delete_tuples(batch.deletes)
                self._invalidate(batch.deletes)
                sent_deletes = len(batch.deletes)
        except AuthorizationError as e:
            return sent_writes, sent_deletes, e
        return sent_writes, sent_deletes, None

    def _invalidate(self, tuples: Sequence[TupleKey]) -> None:
        for tuple_key in tuples:
            self._read_cache.invalidate(
                user=tuple_key.user,
                relation=tuple_key.relation,
                object=tuple_key.object,
            )
