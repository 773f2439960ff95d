"""Inbound Signals - Activity events consumed by the controller.

Every signal is a small frozen dataclass. The event source (editor
integration, WebSocket client, replay file) produces them; the controller
consumes them through a single dispatch() entry point.

Wire schema (camelCase, as sent by the surface client):
{
    "type": "taskEnded",
    "exitCode": 1
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from codedog.exceptions import InvalidSignalError, UnknownSignalError


@dataclass(frozen=True)
class EditChanged:
    """Document text changed. deletion_size counts removed characters."""

    type: ClassVar[str] = "edit"

    deletion_size: int = 0

    def to_dict(self) -> dict:
        return {"type": self.type, "deletionSize": self.deletion_size}


@dataclass(frozen=True)
class Saved:
    type: ClassVar[str] = "save"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class EditorClosed:
    type: ClassVar[str] = "editorClosed"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class ActiveEditorChanged:
    type: ClassVar[str] = "activeEditorChanged"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class DiagnosticsChanged:
    """Diagnostics snapshot for the active document."""

    type: ClassVar[str] = "diagnostics"

    has_error: bool = False
    has_warning: bool = False

    @property
    def has_issue(self) -> bool:
        """Whether anything worth barking at is present."""
        return self.has_error or self.has_warning

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "hasError": self.has_error,
            "hasWarning": self.has_warning,
        }


@dataclass(frozen=True)
class TaskStarted:
    type: ClassVar[str] = "taskStarted"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class TaskEnded:
    """Task process finished. Nonzero exit_code is a failure."""

    type: ClassVar[str] = "taskEnded"

    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        return {"type": self.type, "exitCode": self.exit_code}


@dataclass(frozen=True)
class DebugStarted:
    type: ClassVar[str] = "debugStarted"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class DebugEnded:
    type: ClassVar[str] = "debugEnded"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class Clicked:
    """The user clicked the dog on the rendering surface."""

    type: ClassVar[str] = "dogClicked"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class CommitDetected:
    """Repository HEAD moved to a new commit."""

    type: ClassVar[str] = "commit"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class BranchSwitched:
    type: ClassVar[str] = "branchSwitched"

    branch: str | None = None

    def to_dict(self) -> dict:
        return {"type": self.type, "branch": self.branch}


@dataclass(frozen=True)
class RepositoryOpened:
    type: ClassVar[str] = "repositoryOpened"

    def to_dict(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class Command:
    """A named user command, e.g. codedog.testRun."""

    type: ClassVar[str] = "command"

    name: str

    def to_dict(self) -> dict:
        return {"type": self.type, "name": self.name}


Signal = Union[
    EditChanged,
    Saved,
    EditorClosed,
    ActiveEditorChanged,
    DiagnosticsChanged,
    TaskStarted,
    TaskEnded,
    DebugStarted,
    DebugEnded,
    Clicked,
    CommitDetected,
    BranchSwitched,
    RepositoryOpened,
    Command,
]

SIGNAL_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        EditChanged,
        Saved,
        EditorClosed,
        ActiveEditorChanged,
        DiagnosticsChanged,
        TaskStarted,
        TaskEnded,
        DebugStarted,
        DebugEnded,
        Clicked,
        CommitDetected,
        BranchSwitched,
        RepositoryOpened,
        Command,
    )
}


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


def _get_int(
    data: dict[str, Any],
    key: str,
    signal_type: str,
    default: int | None = None,
) -> int:
    value = data.get(key, default)
    if value is None:
        raise InvalidSignalError(f"Missing field: {key}", signal_type, field=key)
    # bool is an int subclass; true/false is never a valid count or exit code
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSignalError(
            f"Field {key} must be a number, got {type(value).__name__}",
            signal_type,
            field=key,
        )
    if isinstance(value, float) and not value.is_integer():
        raise InvalidSignalError(f"Field {key} must be an integer", signal_type, field=key)
    return int(value)


def _get_bool(data: dict[str, Any], key: str, signal_type: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise InvalidSignalError(
            f"Field {key} must be a boolean, got {type(value).__name__}",
            signal_type,
            field=key,
        )
    return value


def parse_signal(data: dict[str, Any] | str | bytes) -> Signal:
    """Build a signal from its wire form.

    Args:
        data: Decoded JSON object, or the raw JSON text

    Returns:
        The matching signal dataclass

    Raises:
        InvalidSignalError: Payload is not an object or a field is malformed
        UnknownSignalError: The type key is missing or unrecognised
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise InvalidSignalError(f"Malformed JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidSignalError(f"Signal must be an object, got {type(data).__name__}")

    signal_type = data.get("type")
    cls = SIGNAL_TYPES.get(signal_type) if isinstance(signal_type, str) else None
    if cls is None:
        raise UnknownSignalError(signal_type if isinstance(signal_type, str) else None)

    if cls is EditChanged:
        size = _get_int(data, "deletionSize", signal_type, default=0)
        return EditChanged(deletion_size=max(0, size))

    if cls is DiagnosticsChanged:
        return DiagnosticsChanged(
            has_error=_get_bool(data, "hasError", signal_type),
            has_warning=_get_bool(data, "hasWarning", signal_type),
        )

    if cls is TaskEnded:
        return TaskEnded(exit_code=_get_int(data, "exitCode", signal_type))

    if cls is BranchSwitched:
        branch = data.get("branch")
        return BranchSwitched(branch=branch if isinstance(branch, str) else None)

    if cls is Command:
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidSignalError("Missing field: name", signal_type, field="name")
        return Command(name=name)

    return cls()
