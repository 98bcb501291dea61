"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures operation-scoped metadata that should be included with all
    instrumentation events emitted by a probe.

    Attributes:
        request_id: Identifier of the current request/operation.
        connection: Name of the authorization connection in use.

    Example:
        context = ObservationContext(request_id="req-123", connection="default")
        probe = DefaultReadThroughCacheProbe().with_context(context)
    """

    request_id: str | None = None
    connection: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.connection is not None:
            result["connection"] = self.connection
        return result
