"""Ports for collaborators of the cache context.

These protocols define what the cache needs from the outside world beyond
the authorization client itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from permcache.shared_kernel.authorization.types import TupleKey


@runtime_checkable
class ActivityLog(Protocol):
    """Source of recently checked tuples used for cache warming."""

    def record(self, tuple_key: TupleKey) -> None:
        """Record that a tuple was checked."""
        ...

    def recent_checks(self, limit: int) -> list[TupleKey]:
        """Return up to `limit` recently checked tuples, most relevant first."""
        ...
