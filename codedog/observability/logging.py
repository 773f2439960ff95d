"""Structured Logging - JSON or console logs with correlation.

Provides structured logging for:
- Controller lifecycle (start, dispose)
- Issued and skipped directives
- Temporary overrides, death lock and success hold
- Diagnostic bark scheduling
- Rejected signals

All controller logs include surface_id for correlation.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also route standard logging (uvicorn, asyncio) to stdout
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_surface(surface_id: str) -> None:
    """Bind surface_id to all logs in current context.

    Args:
        surface_id: Presentation surface identifier
    """
    structlog.contextvars.bind_contextvars(surface_id=surface_id)


def unbind_surface() -> None:
    """Remove surface_id from log context."""
    structlog.contextvars.unbind_contextvars("surface_id")


# -----------------------------------------------------------------------------
# Event-specific logging
# -----------------------------------------------------------------------------


class ControllerLogger:
    """Logger for animation controller events."""

    def __init__(self, surface_id: str) -> None:
        self._surface_id = surface_id
        self._log = get_logger("controller").bind(surface_id=surface_id)

    def controller_started(self, metadata: dict[str, Any] | None = None) -> None:
        """Log controller start (surface ready)."""
        self._log.info(
            "controller_started",
            event_type="controller.started",
            **(metadata or {}),
        )

    def controller_disposed(self, cancelled_timers: int) -> None:
        """Log controller disposal."""
        self._log.info(
            "controller_disposed",
            event_type="controller.disposed",
            cancelled_timers=cancelled_timers,
        )

    def directive_issued(
        self,
        animation: str,
        previous: str | None,
        forced: bool,
        t_ms: int,
    ) -> None:
        """Log a SetAnimation directive sent to the renderer."""
        self._log.debug(
            "directive_issued",
            event_type="directive.issued",
            animation=animation,
            previous=previous,
            forced=forced,
            t_ms=t_ms,
        )

    def directive_skipped(
        self,
        animation: str,
        reason: str,
        error: dict[str, Any] | None = None,
    ) -> None:
        """Log a directive that could not be issued."""
        self._log.warning(
            "directive_skipped",
            event_type="directive.skipped",
            animation=animation,
            reason=reason,
            error=error,
        )

    def override_started(self, animation: str, duration_ms: int, epoch: int) -> None:
        """Log a temporary override."""
        self._log.debug(
            "override_started",
            event_type="override.started",
            animation=animation,
            duration_ms=duration_ms,
            epoch=epoch,
        )

    def death_entered(self, exit_code: int, cooldown_ms: int) -> None:
        """Log failure lock."""
        self._log.info(
            "death_entered",
            event_type="death.entered",
            exit_code=exit_code,
            cooldown_ms=cooldown_ms,
        )

    def death_recovered(self) -> None:
        """Log failure lock release."""
        self._log.info(
            "death_recovered",
            event_type="death.recovered",
        )

    def success_hold_started(self, duration_ms: int) -> None:
        """Log post-success hold."""
        self._log.info(
            "success_hold_started",
            event_type="success.started",
            duration_ms=duration_ms,
        )

    def bark_scheduled(self, delay_ms: int) -> None:
        """Log delayed diagnostic bark check."""
        self._log.debug(
            "bark_scheduled",
            event_type="bark.scheduled",
            delay_ms=delay_ms,
        )

    def bark_fired(self, next_allowed_ms: int) -> None:
        """Log diagnostic bark."""
        self._log.info(
            "bark_fired",
            event_type="bark.fired",
            next_allowed_ms=next_allowed_ms,
        )

    def bark_cancelled(self, reason: str) -> None:
        """Log pending bark cancellation."""
        self._log.debug(
            "bark_cancelled",
            event_type="bark.cancelled",
            reason=reason,
        )

    def signal_rejected(self, error: dict[str, Any]) -> None:
        """Log a malformed inbound message."""
        self._log.warning(
            "signal_rejected",
            event_type="signal.rejected",
            **error,
        )


# Initialize default logging configuration
def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
