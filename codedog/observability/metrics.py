"""Prometheus Metrics - Controller observability.

Exports:
- Directives issued per animation
- Skipped directives (missing frames)
- Inbound signals per type
- Barks, deaths and timer callback errors
- Active surfaces
"""

from prometheus_client import Counter, Gauge, Info

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

DIRECTIVES_ISSUED = Counter(
    "codedog_directives_total",
    "SetAnimation directives sent to the renderer",
    ["animation"],
)

DIRECTIVES_SKIPPED = Counter(
    "codedog_directives_skipped_total",
    "Directives dropped before reaching the renderer",
    ["reason"],  # asset_unavailable
)

SIGNALS_RECEIVED = Counter(
    "codedog_signals_total",
    "Inbound activity signals",
    ["type"],
)

SIGNALS_REJECTED = Counter(
    "codedog_signals_rejected_total",
    "Malformed or unknown inbound messages",
)

BARKS = Counter(
    "codedog_barks_total",
    "Barks played",
    ["source"],  # diagnostics, click
)

DEATHS = Counter(
    "codedog_deaths_total",
    "Failure lock activations",
)

TIMER_ERRORS = Counter(
    "codedog_timer_errors_total",
    "Scheduled callbacks that raised",
)

# -----------------------------------------------------------------------------
# Gauges
# -----------------------------------------------------------------------------

ACTIVE_SURFACES = Gauge(
    "codedog_active_surfaces",
    "Presentation surfaces with a running controller",
)

# -----------------------------------------------------------------------------
# Info
# -----------------------------------------------------------------------------

BUILD_INFO = Info(
    "codedog_build",
    "Build information",
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def record_directive(animation: str) -> None:
    """Record a directive issued."""
    DIRECTIVES_ISSUED.labels(animation=animation).inc()


def record_directive_skipped(reason: str) -> None:
    """Record a directive that was dropped."""
    DIRECTIVES_SKIPPED.labels(reason=reason).inc()


def record_signal(signal_type: str) -> None:
    """Record an inbound signal."""
    SIGNALS_RECEIVED.labels(type=signal_type).inc()


def record_signal_rejected() -> None:
    """Record a rejected inbound message."""
    SIGNALS_REJECTED.inc()


def record_bark(source: str = "diagnostics") -> None:
    """Record a bark."""
    BARKS.labels(source=source).inc()


def record_death() -> None:
    """Record a failure lock."""
    DEATHS.inc()


def record_timer_error() -> None:
    """Record a scheduled callback failure."""
    TIMER_ERRORS.inc()


def record_surface_start() -> None:
    """Record controller start."""
    ACTIVE_SURFACES.inc()


def record_surface_end() -> None:
    """Record controller disposal."""
    ACTIVE_SURFACES.dec()


def set_build_info(version: str) -> None:
    """Set build information."""
    BUILD_INFO.info({"version": version})
