"""Authorization type definitions.

Defines the relationship tuple value object and the pending operation
descriptors shared by the read-through and write-behind caches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

_NAME = re.compile(r"[^\s:#]+")
_REFERENCE = re.compile(r"[^\s:#]+:[^\s#]+")


class OperationKind(StrEnum):
    """Kind of buffered mutation against the authorization store."""

    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class TupleKey:
    """A relationship fact evaluated by the authorization service.

    Attributes:
        user: Subject identifier (e.g., "user:alice" or "group:eng#member")
        relation: Relation name (e.g., "viewer", "owner")
        object: Object identifier (e.g., "document:readme")
    """

    user: str
    relation: str
    object: str

    def __post_init__(self) -> None:
        for name in ("user", "relation", "object"):
            if not getattr(self, name):
                raise ValueError(f"TupleKey.{name} must be a non-empty string")

    def validate(self) -> None:
        """Check that the tuple can be written to the authorization store.

        The object must be a "type:id" reference and the user either a
        reference or a userset ("type:id#relation"). Relation names may not
        contain ":", "#" or whitespace.

        Raises:
            ValueError: If an identifier is malformed
        """
        subject, hash_sign, userset = self.user.partition("#")
        if not _REFERENCE.fullmatch(subject) or (
            hash_sign and not _NAME.fullmatch(userset)
        ):
            raise ValueError(
                f"Invalid user {self.user!r} (expected 'type:id' or 'type:id#relation')"
            )
        if not _NAME.fullmatch(self.relation):
            raise ValueError(f"Invalid relation {self.relation!r}")
        if not _REFERENCE.fullmatch(self.object):
            raise ValueError(
                f"Invalid object {self.object!r} (expected 'type:id')"
            )

    @property
    def object_type(self) -> str:
        """Type portion of the object identifier ("document" for "document:1")."""
        return object_type_of(self.object)

    def as_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary for logging and serialization."""
        return {"user": self.user, "relation": self.relation, "object": self.object}

    def __str__(self) -> str:
        return f"{self.user}#{self.relation}@{self.object}"


@dataclass(frozen=True)
class PendingOperation:
    """A buffered write or delete waiting to be flushed.

    Created when a grant/revoke is buffered; consumed only by a flush.
    Never mutated in place.

    Attributes:
        kind: Whether the tuple is to be written or deleted
        tuple: The relationship tuple
        enqueued_at: When the operation was buffered (UTC)
    """

    kind: OperationKind
    tuple: TupleKey
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def object_type_of(object: str) -> str:
    """Type portion of an object identifier ("document" for "document:1")."""
    return object.split(":", 1)[0]
