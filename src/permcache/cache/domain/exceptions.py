"""Exceptions raised by the cache layer.

Remote failures surface as RemoteUnavailableError from the shared kernel;
these cover configuration and flush outcomes owned by the cache itself.
"""


class CacheError(Exception):
    """Base exception for cache errors."""

    pass


class InvalidConfigurationError(CacheError):
    """Raised when an operation is invoked on a disabled or misconfigured cache."""

    pass


class ClearNotConfirmedError(CacheError):
    """Raised when discarding pending operations without operator confirmation."""

    pass


class FlushError(CacheError):
    """Raised when one or more batches of a flush failed to send.

    Operations in a failed batch are dropped (at-most-once delivery) and must
    be re-issued by the application if still needed.

    Attributes:
        writes: Writes confirmed by the remote store before the failure
        deletes: Deletes confirmed by the remote store before the failure
        failed_batches: Number of batches that failed in this flush
        dropped: Number of operations dropped with the failed batches
    """

    def __init__(
        self,
        message: str,
        *,
        writes: int = 0,
        deletes: int = 0,
        failed_batches: int = 0,
        dropped: int = 0,
    ) -> None:
        super().__init__(message)
        self.writes = writes
        self.deletes = deletes
        self.failed_batches = failed_batches
        self.dropped = dropped
