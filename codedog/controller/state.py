"""Controller State - The single mutable record behind the animation.

Owned exclusively by one AnimationController and mutated only from its
signal handlers and timer callbacks. Created when the surface becomes
ready and dropped on disposal.
"""

from dataclasses import dataclass, field

from codedog.animation.base import AnimationName
from codedog.controller.signals import DiagnosticsChanged


@dataclass
class ControllerState:
    """Presentation state of one surface.

    Timestamps are scheduler milliseconds.
    """

    current_animation: AnimationName | None = None

    # Temporary override
    temp_hold_until: int | None = None
    override_epoch: int = 0  # Bumped on every new or cleared override

    # Locks and holds
    death_locked: bool = False
    success_run_active: bool = False

    # Activity
    last_activity_ms: int = 0
    idle_blink_count: int = 0

    # Diagnostic bark gate
    bark_pending: bool = False
    next_bark_allowed_at: int = 0
    diagnostics: DiagnosticsChanged = field(default_factory=DiagnosticsChanged)

    # Click rate limit
    last_click_ms: int | None = None

    def temp_active(self, now_ms: int) -> bool:
        """Whether a temporary override still holds the surface."""
        return self.temp_hold_until is not None and now_ms < self.temp_hold_until

    def to_dict(self) -> dict:
        """Snapshot for logging and debugging."""
        return {
            "current_animation": (
                self.current_animation.value if self.current_animation else None
            ),
            "temp_hold_until": self.temp_hold_until,
            "override_epoch": self.override_epoch,
            "death_locked": self.death_locked,
            "success_run_active": self.success_run_active,
            "last_activity_ms": self.last_activity_ms,
            "idle_blink_count": self.idle_blink_count,
            "bark_pending": self.bark_pending,
            "next_bark_allowed_at": self.next_bark_allowed_at,
        }
