"""SpiceDB implementation of the AuthorizationClient protocol."""

from permcache.shared_kernel.authorization.exceptions import (
    SpiceDBConnectionError,
    SpiceDBRequestError,
)
from permcache.shared_kernel.authorization.spicedb.client import (
    SpiceDBAuthorizationClient,
)

__all__ = [
    "SpiceDBAuthorizationClient",
    "SpiceDBConnectionError",
    "SpiceDBRequestError",
]
