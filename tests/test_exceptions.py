"""Tests for the CodeDog exception hierarchy."""

import pytest

from codedog import (
    AssetError,
    AssetUnavailableError,
    CodeDogError,
    ConfigurationError,
    ControllerError,
    ControllerStateError,
    InvalidConfigError,
    InvalidSignalError,
    SignalError,
    UnknownSignalError,
)


class TestCodeDogError:
    """Tests for the base exception."""

    def test_message_only(self):
        """String form is the message."""
        error = CodeDogError("something broke")
        assert str(error) == "something broke"
        assert error.details == {}
        assert error.recoverable is False

    def test_details_in_str(self):
        """Details are appended to the string form."""
        error = CodeDogError("bad", details={"k": 1})
        assert str(error) == "bad ({'k': 1})"

    def test_to_dict(self):
        """Serialises for logging."""
        error = CodeDogError("bad", details={"k": 1}, recoverable=True)
        assert error.to_dict() == {
            "type": "CodeDogError",
            "message": "bad",
            "details": {"k": 1},
            "recoverable": True,
        }


class TestHierarchy:
    """Tests for subclass relationships."""

    @pytest.mark.parametrize(
        ("cls", "parent"),
        [
            (InvalidSignalError, SignalError),
            (UnknownSignalError, SignalError),
            (AssetUnavailableError, AssetError),
            (ControllerStateError, ControllerError),
            (InvalidConfigError, ConfigurationError),
            (SignalError, CodeDogError),
            (AssetError, CodeDogError),
            (ControllerError, CodeDogError),
            (ConfigurationError, CodeDogError),
        ],
    )
    def test_subclass(self, cls, parent):
        """Every error derives from its category."""
        assert issubclass(cls, parent)


class TestSpecificErrors:
    """Tests for concrete exceptions."""

    def test_invalid_signal(self):
        """Field and type end up in details."""
        error = InvalidSignalError("Missing field: exitCode", "taskEnded", field="exitCode")
        assert error.details == {"field": "exitCode", "signal_type": "taskEnded"}
        assert error.recoverable is True

    def test_unknown_signal(self):
        """Unknown type is named in the message."""
        error = UnknownSignalError("launch")
        assert "launch" in error.message
        assert error.signal_type == "launch"

    def test_unknown_signal_without_type(self):
        """Missing type leaves details empty."""
        error = UnknownSignalError(None)
        assert error.details == {}

    def test_asset_unavailable(self):
        """Animation is recorded."""
        error = AssetUnavailableError("Walk")
        assert error.animation == "Walk"
        assert error.details == {"animation": "Walk"}
        assert error.recoverable is True

    def test_controller_state(self):
        """Lifecycle misuse carries surface and lifecycle."""
        error = ControllerStateError("nope", surface_id="s1", lifecycle="disposed")
        assert error.details == {"surface_id": "s1", "lifecycle": "disposed"}
        assert error.recoverable is False

    def test_invalid_config(self):
        """Config error names the key."""
        error = InvalidConfigError("bark_delay_ms", -1, "must be >= 0")
        assert error.key == "bark_delay_ms"
        assert error.details["value"] == "-1"
