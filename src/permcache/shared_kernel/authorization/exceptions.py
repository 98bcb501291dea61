"""Exceptions for authorization service operations."""


class AuthorizationError(Exception):
    """Base exception for authorization errors."""

    pass


class RemoteUnavailableError(AuthorizationError):
    """Raised when the remote authorization service cannot serve a request.

    Covers network failures and service-side errors during checks, writes and
    deletes. Never cached and never retried by the cache layer.
    """

    pass


class SpiceDBConnectionError(RemoteUnavailableError):
    """Raised when connection to SpiceDB fails."""

    pass


class SpiceDBRequestError(RemoteUnavailableError):
    """Raised when a SpiceDB check, write or lookup request fails."""

    pass
