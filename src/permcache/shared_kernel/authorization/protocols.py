"""Authorization client protocol.

Defines the interface of the remote authorization service the cache layer
talks to, allowing for swappable implementations (SpiceDB, fakes in tests,
alternative providers).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from permcache.shared_kernel.authorization.types import TupleKey


class AuthorizationClient(Protocol):
    """Protocol for remote authorization services.

    Implementations perform the actual network calls. They are expected to
    enforce their own timeouts; callers add none. Every method raises
    RemoteUnavailableError (or a subclass) when the service cannot be
    reached or rejects the request.
    """

    async def check(
        self,
        user: str,
        relation: str,
        object: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Check whether user has relation on object.

        Args:
            user: Subject identifier (e.g., "user:alice")
            relation: Relation or permission to check (e.g., "viewer")
            object: Object identifier (e.g., "document:readme")
            contextual_tuples: Tuples considered only for this check
            context: Condition/caveat context for this check

        Returns:
            True if the relationship holds, False otherwise
        """
        ...

    async def write_tuples(self, tuples: Sequence[TupleKey]) -> None:
        """Write a batch of relationship tuples.

        Args:
            tuples: Tuples to write; the call succeeds or fails as a whole
        """
        ...

    async def delete_tuples(self, tuples: Sequence[TupleKey]) -> None:
        """Delete a batch of relationship tuples.

        Args:
            tuples: Tuples to delete; the call succeeds or fails as a whole
        """
        ...

    async def list_objects(
        self,
        user: str,
        relation: str,
        object_type: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """List objects of a type on which user has relation.

        Returns:
            Object identifiers (e.g., ["document:readme", "document:faq"])
        """
        ...

    async def expand(self, relation: str, object: str) -> dict[str, Any]:
        """Expand the userset tree for relation on object.

        Returns:
            The tree as a JSON-compatible dictionary
        """
        ...
