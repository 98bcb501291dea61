"""Value objects returned by cache operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from permcache.shared_kernel.authorization.types import PendingOperation, TupleKey


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a cached permission check."""

    allowed: bool
    from_cache: bool

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class ListObjectsResult:
    """Outcome of a cached list-objects query."""

    objects: tuple[str, ...]
    from_cache: bool


@dataclass(frozen=True)
class PendingCounts:
    """Snapshot of pending operation counts."""

    writes: int = 0
    deletes: int = 0

    @property
    def total(self) -> int:
        return self.writes + self.deletes


@dataclass(frozen=True)
class DrainedBatch:
    """Operations removed from the pending queue by a single drain.

    Attributes:
        writes: Tuples to write, in enqueue order
        deletes: Tuples to delete, in enqueue order
        remaining: Operations left in the queue after the drain
    """

    writes: list[TupleKey] = field(default_factory=list)
    deletes: list[TupleKey] = field(default_factory=list)
    remaining: int = 0

    @property
    def size(self) -> int:
        return len(self.writes) + len(self.deletes)

    def __bool__(self) -> bool:
        return self.size > 0


@dataclass(frozen=True)
class PendingSnapshot:
    """Pending operations grouped by kind, oldest first."""

    writes: list[PendingOperation] = field(default_factory=list)
    deletes: list[PendingOperation] = field(default_factory=list)


@dataclass(frozen=True)
class FlushResult:
    """Counts of operations confirmed by the remote store during a flush."""

    writes: int = 0
    deletes: int = 0

    @property
    def total(self) -> int:
        return self.writes + self.deletes


@dataclass(frozen=True)
class WriteBehindStatus:
    """Operator-facing view of a write-behind cache.

    Attributes:
        pending_writes: Buffered writes
        pending_deletes: Buffered deletes
        pending_total: All buffered operations
        batch_size: Maximum operations sent per batch
        flush_interval: Time between scheduled flush attempts
        recent: Most recent pending operations, oldest first
    """

    pending_writes: int
    pending_deletes: int
    pending_total: int
    batch_size: int
    flush_interval: timedelta
    recent: list[PendingOperation] = field(default_factory=list)


@dataclass(frozen=True)
class CacheStatsView:
    """Operator-facing cache hit statistics."""

    hits: int
    misses: int
    hit_rate: float
