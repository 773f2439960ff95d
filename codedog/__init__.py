"""CodeDog - Reactive animation controller for an editor companion."""

__version__ = "0.3.0"

# Export exception hierarchy for easy importing
from codedog.exceptions import (
    CodeDogError,
    SignalError,
    InvalidSignalError,
    UnknownSignalError,
    AssetError,
    AssetUnavailableError,
    ControllerError,
    ControllerStateError,
    ConfigurationError,
    InvalidConfigError,
)

__all__ = [
    "__version__",
    # Base
    "CodeDogError",
    # Signals
    "SignalError",
    "InvalidSignalError",
    "UnknownSignalError",
    # Assets
    "AssetError",
    "AssetUnavailableError",
    # Controller
    "ControllerError",
    "ControllerStateError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
]
