"""Domain probe for authorization client operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to remote checks and tuple writes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from permcache.shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization client operations."""

    def tuples_written(self, count: int) -> None:
        """Record that a batch of tuples was written."""
        ...

    def tuples_write_failed(self, count: int, error: Exception) -> None:
        """Record that writing a batch of tuples failed."""
        ...

    def tuples_deleted(self, count: int) -> None:
        """Record that a batch of tuples was deleted."""
        ...

    def tuples_delete_failed(self, count: int, error: Exception) -> None:
        """Record that deleting a batch of tuples failed."""
        ...

    def permission_checked(
        self,
        user: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        """Record that a permission was checked."""
        ...

    def permission_check_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        ...

    def objects_listed(
        self,
        user: str,
        relation: str,
        object_type: str,
        count: int,
    ) -> None:
        """Record that objects were listed."""
        ...

    def request_failed(self, operation: str, error: Exception) -> None:
        """Record that a lookup/expand request failed."""
        ...

    def connection_failed(self, endpoint: str, error: Exception) -> None:
        """Record that connection to the authorization service failed."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def tuples_written(self, count: int) -> None:
        """Record that a batch of tuples was written."""
        self._logger.info(
            "authorization_tuples_written",
            count=count,
            **self._get_context_kwargs(),
        )

    def tuples_write_failed(self, count: int, error: Exception) -> None:
        """Record that writing a batch of tuples failed."""
        self._logger.error(
            "authorization_tuples_write_failed",
            count=count,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tuples_deleted(self, count: int) -> None:
        """Record that a batch of tuples was deleted."""
        self._logger.info(
            "authorization_tuples_deleted",
            count=count,
            **self._get_context_kwargs(),
        )

    def tuples_delete_failed(self, count: int, error: Exception) -> None:
        """Record that deleting a batch of tuples failed."""
        self._logger.error(
            "authorization_tuples_delete_failed",
            count=count,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def permission_checked(
        self,
        user: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        """Record that a permission was checked."""
        self._logger.debug(
            "authorization_permission_checked",
            user=user,
            relation=relation,
            object=object,
            allowed=allowed,
            **self._get_context_kwargs(),
        )

    def permission_check_failed(
        self,
        user: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        self._logger.error(
            "authorization_permission_check_failed",
            user=user,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def objects_listed(
        self,
        user: str,
        relation: str,
        object_type: str,
        count: int,
    ) -> None:
        """Record that objects were listed."""
        self._logger.debug(
            "authorization_objects_listed",
            user=user,
            relation=relation,
            object_type=object_type,
            count=count,
            **self._get_context_kwargs(),
        )

    def request_failed(self, operation: str, error: Exception) -> None:
        """Record that a lookup/expand request failed."""
        self._logger.error(
            "authorization_request_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, endpoint: str, error: Exception) -> None:
        """Record that connection to the authorization service failed."""
        self._logger.error(
            "authorization_connection_failed",
            endpoint=endpoint,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
