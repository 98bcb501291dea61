"""Cache key value objects.

Cache keys are deterministic composites of the connection name, the checked
tuple and a hash of any contextual data supplied with the request, so two
checks share an entry only when the remote service would see identical
input.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from permcache.shared_kernel.authorization.types import TupleKey, object_type_of

EMPTY_CONTEXT_HASH = ""


def hash_context(
    contextual_tuples: Sequence[TupleKey] = (),
    context: Mapping[str, Any] | None = None,
) -> str:
    """Compute a stable hash of contextual tuples and context.

    Contextual tuples are order-insensitive; context keys are sorted.
    Returns EMPTY_CONTEXT_HASH when neither is supplied.

    Args:
        contextual_tuples: Tuples supplied alongside a check
        context: Condition/caveat context supplied alongside a check

    Returns:
        Hex SHA-256 digest, or an empty string for no context
    """
    if not contextual_tuples and not context:
        return EMPTY_CONTEXT_HASH

    payload = {
        "tuples": sorted(
            [t.user, t.relation, t.object] for t in contextual_tuples
        ),
        "context": dict(context or {}),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheKey:
    """Key of a cached permission check.

    Attributes:
        connection: Name of the authorization connection
        user: Subject identifier
        relation: Relation or permission
        object: Object identifier
        context_hash: Hash of contextual tuples/context (see hash_context)
    """

    connection: str
    user: str
    relation: str
    object: str
    context_hash: str = EMPTY_CONTEXT_HASH

    @classmethod
    def for_check(
        cls,
        connection: str,
        user: str,
        relation: str,
        object: str,
        contextual_tuples: Sequence[TupleKey] = (),
        context: Mapping[str, Any] | None = None,
    ) -> CacheKey:
        """Build the key for a check request."""
        return cls(
            connection=connection,
            user=user,
            relation=relation,
            object=object,
            context_hash=hash_context(contextual_tuples, context),
        )

    @property
    def object_type(self) -> str:
        return object_type_of(self.object)

    def matches(
        self,
        user: str | None = None,
        relation: str | None = None,
        object: str | None = None,
        object_type: str | None = None,
    ) -> bool:
        """Return True if the key matches every supplied (non-None) filter."""
        if user is not None and self.user != user:
            return False
        if relation is not None and self.relation != relation:
            return False
        if object is not None and self.object != object:
            return False
        if object_type is not None and self.object_type != object_type:
            return False
        return True


@dataclass(frozen=True)
class ListCacheKey:
    """Key of a cached list-objects result.

    Attributes:
        connection: Name of the authorization connection
        user: Subject identifier
        relation: Relation or permission
        object_type: Type of objects listed (e.g., "document")
        context_hash: Hash of contextual tuples/context (see hash_context)
    """

    connection: str
    user: str
    relation: str
    object_type: str
    context_hash: str = EMPTY_CONTEXT_HASH

    def matches(
        self,
        user: str | None = None,
        relation: str | None = None,
        object: str | None = None,
        object_type: str | None = None,
    ) -> bool:
        """Return True if the key matches every supplied (non-None) filter.

        A specific object matches when it is of the listed type, since a
        change to any such object can alter the listing.
        """
        if user is not None and self.user != user:
            return False
        if relation is not None and self.relation != relation:
            return False
        if object is not None and self.object_type != object_type_of(object):
            return False
        if object_type is not None and self.object_type != object_type:
            return False
        return True
