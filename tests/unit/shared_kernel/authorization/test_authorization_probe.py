"""Unit tests for authorization domain probe."""

from unittest.mock import Mock

from permcache.shared_kernel.authorization.observability import (
    DefaultAuthorizationProbe,
)
from permcache.shared_kernel.observability_context import ObservationContext


class TestDefaultAuthorizationProbe:
    """Tests for DefaultAuthorizationProbe."""

    def test_creates_with_default_logger(self):
        """Test that probe can be created without providing a logger."""
        probe = DefaultAuthorizationProbe()
        assert probe._logger is not None

    def test_accepts_custom_logger(self):
        """Test that probe accepts a custom logger."""
        custom_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=custom_logger)
        assert probe._logger is custom_logger


class TestTuplesWritten:
    """Tests for tuples_written probe method."""

    def test_logs_count(self):
        """Test that a confirmed write is logged with its size."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)

        probe.tuples_written(count=3)

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "authorization_tuples_written"
        assert call_args[1]["count"] == 3


class TestTuplesWriteFailed:
    """Tests for tuples_write_failed probe method."""

    def test_logs_error_with_details(self):
        """Test that write failures are logged with error details."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger)
        error = ValueError("Connection refused")

        probe.tuples_write_failed(count=2, error=error)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert call_args[1]["count"] == 2
        assert call_args[1]["error"] == "Connection refused"
        assert call_args[1]["error_type"] == "ValueError"


class TestWithContext:
    """Tests for binding observation context."""

    def test_context_is_included_in_log_calls(self):
        """Test that bound context fields are added to every event."""
        mock_logger = Mock()
        probe = DefaultAuthorizationProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-1", connection="primary")
        )

        probe.tuples_deleted(count=1)

        call_args = mock_logger.info.call_args
        assert call_args[1]["request_id"] == "req-1"
        assert call_args[1]["connection"] == "primary"
