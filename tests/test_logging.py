"""Tests for Structured Logging.

Tests cover:
- configure_logging with JSON and console formats
- get_logger function
- bind_surface and unbind_surface
- ControllerLogger events
- init_logging function
"""

from unittest.mock import MagicMock, patch

import structlog

from codedog.observability.logging import (
    ControllerLogger,
    bind_surface,
    configure_logging,
    get_logger,
    init_logging,
    unbind_surface,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_json_format(self):
        """Configure logging with JSON format."""
        # Should not raise
        configure_logging(level="INFO", json_format=True)

    def test_configure_console_format(self):
        """Configure logging with console format."""
        configure_logging(level="DEBUG", json_format=False)

    def test_configure_different_levels(self):
        """Configure logging with different levels."""
        configure_logging(level="WARNING")
        configure_logging(level="ERROR")

    def test_init_logging(self):
        """init_logging delegates to configure_logging."""
        with patch("codedog.observability.logging.configure_logging") as mock_configure:
            init_logging(json_format=False, level="DEBUG")

        mock_configure.assert_called_once_with(level="DEBUG", json_format=False)


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_with_name(self):
        """Get logger with specific name."""
        assert get_logger("test_module") is not None

    def test_get_logger_returns_bound_logger(self):
        """get_logger returns something bindable."""
        assert hasattr(get_logger("test"), "bind")


class TestBindSurface:
    """Tests for bind_surface and unbind_surface."""

    def test_bind_and_unbind(self):
        """surface_id enters and leaves the log context."""
        bind_surface("surface-1")
        assert structlog.contextvars.get_contextvars()["surface_id"] == "surface-1"

        unbind_surface()
        assert "surface_id" not in structlog.contextvars.get_contextvars()

    def test_unbind_without_bind(self):
        """Unbinding an absent key is safe."""
        unbind_surface()


class TestControllerLogger:
    """Tests for ControllerLogger events."""

    def _logger(self) -> tuple[ControllerLogger, MagicMock]:
        log = ControllerLogger("surface-7")
        mock = MagicMock()
        log._log = mock
        return log, mock

    def test_binds_surface_id(self):
        """Logger is created with the surface id."""
        log = ControllerLogger("surface-7")
        assert log._surface_id == "surface-7"

    def test_controller_started(self):
        """Start event includes metadata."""
        log, mock = self._logger()
        log.controller_started({"size": 120})

        mock.info.assert_called_once_with(
            "controller_started", event_type="controller.started", size=120
        )

    def test_controller_disposed(self):
        """Dispose event reports cancelled timers."""
        log, mock = self._logger()
        log.controller_disposed(3)

        mock.info.assert_called_once_with(
            "controller_disposed", event_type="controller.disposed", cancelled_timers=3
        )

    def test_directive_issued_is_debug(self):
        """Directives are logged at debug level."""
        log, mock = self._logger()
        log.directive_issued("Walk", "IdleBlink", False, 1200)

        mock.debug.assert_called_once()
        assert mock.debug.call_args.kwargs["animation"] == "Walk"
        assert mock.debug.call_args.kwargs["previous"] == "IdleBlink"

    def test_directive_skipped_is_warning(self):
        """Skipped directives are warnings."""
        log, mock = self._logger()
        log.directive_skipped("Bark", "asset_unavailable", {"type": "AssetUnavailableError"})

        mock.warning.assert_called_once()
        assert mock.warning.call_args.kwargs["reason"] == "asset_unavailable"

    def test_death_events(self):
        """Death lock and recovery are info events."""
        log, mock = self._logger()
        log.death_entered(exit_code=1, cooldown_ms=5000)
        log.death_recovered()

        assert mock.info.call_count == 2
        assert mock.info.call_args_list[0].kwargs["exit_code"] == 1

    def test_bark_events(self):
        """Bark lifecycle events."""
        log, mock = self._logger()
        log.bark_scheduled(5000)
        log.bark_fired(36000)
        log.bark_cancelled("resolved")

        assert mock.debug.call_count == 2
        mock.info.assert_called_once_with(
            "bark_fired", event_type="bark.fired", next_allowed_ms=36000
        )

    def test_override_and_success(self):
        """Override and success hold events."""
        log, mock = self._logger()
        log.override_started("Sniff", 900, 4)
        log.success_hold_started(10000)

        mock.debug.assert_called_once()
        assert mock.debug.call_args.kwargs["epoch"] == 4
        mock.info.assert_called_once()

    def test_signal_rejected(self):
        """Rejected signals log the error dictionary."""
        log, mock = self._logger()
        log.signal_rejected({"type": "UnknownSignalError", "message": "Unknown signal type"})

        mock.warning.assert_called_once_with(
            "signal_rejected",
            event_type="signal.rejected",
            type="UnknownSignalError",
            message="Unknown signal type",
        )
