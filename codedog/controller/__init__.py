"""Controller package - Activity signals to a single animation.

Provides:
- Inbound signal types and wire parsing
- Controller state record
- AnimationController (priority resolver and timer owner)
"""

from codedog.controller.controller import COMMANDS, AnimationController
from codedog.controller.signals import (
    SIGNAL_TYPES,
    ActiveEditorChanged,
    BranchSwitched,
    Clicked,
    Command,
    CommitDetected,
    DebugEnded,
    DebugStarted,
    DiagnosticsChanged,
    EditChanged,
    EditorClosed,
    RepositoryOpened,
    Saved,
    Signal,
    TaskEnded,
    TaskStarted,
    parse_signal,
)
from codedog.controller.state import ControllerState

__all__ = [
    # Controller
    "AnimationController",
    "COMMANDS",
    "ControllerState",
    # Signals
    "SIGNAL_TYPES",
    "ActiveEditorChanged",
    "BranchSwitched",
    "Clicked",
    "Command",
    "CommitDetected",
    "DebugEnded",
    "DebugStarted",
    "DiagnosticsChanged",
    "EditChanged",
    "EditorClosed",
    "RepositoryOpened",
    "Saved",
    "Signal",
    "TaskEnded",
    "TaskStarted",
    "parse_signal",
]
