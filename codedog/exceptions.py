"""CodeDog Exception Hierarchy.

Provides structured exception classes for the controller and its
collaborators. Nothing in the controller is fatal: these exceptions are
raised at the edges (signal parsing, asset lookup, lifecycle misuse) and
absorbed and logged by the caller.

Hierarchy:
    CodeDogError (base)
    ├── SignalError
    │   ├── InvalidSignalError
    │   └── UnknownSignalError
    ├── AssetError
    │   └── AssetUnavailableError
    ├── ControllerError
    │   └── ControllerStateError
    └── ConfigurationError
        └── InvalidConfigError
"""

from typing import Any


class CodeDogError(Exception):
    """Base exception for all CodeDog errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Signal Errors
# =============================================================================


class SignalError(CodeDogError):
    """Base exception for inbound signal errors."""

    def __init__(
        self,
        message: str,
        signal_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if signal_type:
            details["signal_type"] = signal_type
        # Signals are dropped, the controller keeps running
        super().__init__(message, details, recoverable=True)
        self.signal_type = signal_type


class InvalidSignalError(SignalError):
    """Raised when a signal payload is malformed."""

    def __init__(
        self,
        message: str,
        signal_type: str | None = None,
        field: str | None = None,
    ) -> None:
        details = {}
        if field:
            details["field"] = field
        super().__init__(message, signal_type=signal_type, details=details)
        self.field = field


class UnknownSignalError(SignalError):
    """Raised when a message carries an unrecognised signal type."""

    def __init__(self, signal_type: str | None) -> None:
        super().__init__(
            message=f"Unknown signal type: {signal_type!r}",
            signal_type=signal_type,
        )


# =============================================================================
# Asset Errors
# =============================================================================


class AssetError(CodeDogError):
    """Base exception for animation asset errors."""


class AssetUnavailableError(AssetError):
    """Raised when no frames can be resolved for an animation."""

    def __init__(self, animation: str) -> None:
        super().__init__(
            message=f"No frames available for animation: {animation}",
            details={"animation": animation},
            recoverable=True,
        )
        self.animation = animation


# =============================================================================
# Controller Errors
# =============================================================================


class ControllerError(CodeDogError):
    """Base exception for animation controller errors."""


class ControllerStateError(ControllerError):
    """Raised for invalid controller lifecycle operations."""

    def __init__(
        self,
        message: str,
        surface_id: str | None = None,
        lifecycle: str | None = None,
    ) -> None:
        details = {}
        if surface_id:
            details["surface_id"] = surface_id
        if lifecycle:
            details["lifecycle"] = lifecycle
        super().__init__(message, details)
        self.surface_id = surface_id
        self.lifecycle = lifecycle


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CodeDogError):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str) -> None:
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
