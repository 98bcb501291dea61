"""Authorization primitives shared by the cache layer.

This module provides the relationship tuple types, the authorization client
protocol and the exception hierarchy for remote authorization services.
"""

from permcache.shared_kernel.authorization.exceptions import (
    AuthorizationError,
    RemoteUnavailableError,
)
from permcache.shared_kernel.authorization.protocols import AuthorizationClient
from permcache.shared_kernel.authorization.types import (
    OperationKind,
    PendingOperation,
    TupleKey,
    object_type_of,
)

__all__ = [
    "AuthorizationClient",
    "AuthorizationError",
    "OperationKind",
    "PendingOperation",
    "RemoteUnavailableError",
    "TupleKey",
    "object_type_of",
]
