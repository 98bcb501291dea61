"""Thread-safe buffer of pending write and delete operations.

The queue keeps a single insertion-ordered mapping from tuple to its latest
pending operation. Enqueueing an operation for a tuple that is already
pending supersedes the earlier one and moves the tuple to the tail, so a
drain always sends the most recent intent for each tuple and preserves the
original order across both kinds.
"""

from __future__ import annotations

import threading
from collections import OrderedDict

from permcache.cache.domain.value_objects import (
    DrainedBatch,
    PendingCounts,
    PendingSnapshot,
)
from permcache.shared_kernel.authorization.types import (
    OperationKind,
    PendingOperation,
    TupleKey,
)


class PendingOperationQueue:
    """Ordered, collapsing buffer of pending operations.

    All methods are safe to call concurrently from multiple threads. The
    internal lock is held only for in-memory work.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: OrderedDict[TupleKey, PendingOperation] = OrderedDict()
        self._writes = 0
        self._deletes = 0

    def enqueue(
        self,
        kind: OperationKind,
        tuple_key: TupleKey,
    ) -> tuple[PendingOperation, PendingOperation | None]:
        """Append an operation, superseding any pending one for the same tuple.

        Args:
            kind: Write or delete
            tuple_key: The tuple to write or delete

        Returns:
            The new operation and the one it superseded (None if the tuple
            was not pending)
        """
        operation = PendingOperation(kind=OperationKind(kind), tuple=tuple_key)
        with self._lock:
            superseded = self._pending.pop(tuple_key, None)
            if superseded is not None:
                self._adjust(superseded.kind, -1)
            self._pending[tuple_key] = operation
            self._adjust(operation.kind, 1)
        return operation, superseded

    def drain_batch(self, max_size: int) -> DrainedBatch:
        """Atomically remove up to max_size operations from the head.

        Args:
            max_size: Maximum number of operations to remove (>= 1)

        Returns:
            The removed writes and deletes in enqueue order and the number
            of operations still pending
        """
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")

        writes: list[TupleKey] = []
        deletes: list[TupleKey] = []
        with self._lock:
            for _ in range(min(max_size, len(self._pending))):
                tuple_key, operation = self._pending.popitem(last=False)
                if operation.kind is OperationKind.WRITE:
                    writes.append(tuple_key)
                else:
                    deletes.append(tuple_key)
            self._writes -= len(writes)
            self._deletes -= len(deletes)
            remaining = len(self._pending)

        return DrainedBatch(writes=writes, deletes=deletes, remaining=remaining)

    def counts(self) -> PendingCounts:
        """Return a snapshot of pending counts."""
        with self._lock:
            return PendingCounts(writes=self._writes, deletes=self._deletes)

    def snapshot(self, limit: int | None = None) -> PendingSnapshot:
        """Return pending operations grouped by kind.

        Args:
            limit: If given, only the most recent `limit` operations of each kind

        Returns:
            Pending writes and deletes, oldest first
        """
        with self._lock:
            operations = list(self._pending.values())

        writes = [op for op in operations if op.kind is OperationKind.WRITE]
        deletes = [op for op in operations if op.kind is OperationKind.DELETE]
        if limit is not None:
            writes = writes[-limit:] if limit > 0 else []
            deletes = deletes[-limit:] if limit > 0 else []
        return PendingSnapshot(writes=writes, deletes=deletes)

    def recent(self, limit: int) -> list[PendingOperation]:
        """Return the most recent `limit` operations of either kind, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            operations = list(self._pending.values())
        return operations[-limit:]

    def clear(self) -> int:
        """Atomically discard every pending operation.

        Returns:
            Number of operations discarded
        """
        with self._lock:
            discarded = len(self._pending)
            self._pending.clear()
            self._writes = 0
            self._deletes = 0
        return discarded

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _adjust(self, kind: OperationKind, delta: int) -> None:
        if kind is OperationKind.WRITE:
            self._writes += delta
        else:
            self._deletes += delta
