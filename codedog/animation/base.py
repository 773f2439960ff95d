"""Animation Base Interface - Names, playback specs and directives.

Defines the closed set of animations, their frame timing, the
SetAnimation directive sent to the renderer and the collaborator
protocols the controller depends on.

Directive wire schema:
{
    "type": "set",
    "name": "Walk",
    "frames": ["/media/Walk/walk_1.png", ...],
    "interval": 100,
    "loop": true
}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class AnimationName(Enum):
    """Every animation the dog can show."""

    BARK = "Bark"
    BITE = "Bite"
    BLINK = "Blink"
    DEATH = "Death"
    IDLE_BLINK = "IdleBlink"
    RUN = "Run"
    SNIFF = "Sniff"
    TRACKING = "Tracking"
    WALK = "Walk"


@dataclass(frozen=True)
class AnimationSpec:
    """Playback timing for one animation."""

    interval_ms: int
    loop: bool

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")


ANIMATION_SPECS: dict[AnimationName, AnimationSpec] = {
    AnimationName.BARK: AnimationSpec(interval_ms=100, loop=True),
    AnimationName.BITE: AnimationSpec(interval_ms=80, loop=False),
    AnimationName.BLINK: AnimationSpec(interval_ms=110, loop=False),
    AnimationName.DEATH: AnimationSpec(interval_ms=160, loop=False),
    AnimationName.IDLE_BLINK: AnimationSpec(interval_ms=130, loop=True),
    AnimationName.RUN: AnimationSpec(interval_ms=90, loop=True),
    AnimationName.SNIFF: AnimationSpec(interval_ms=100, loop=True),
    AnimationName.TRACKING: AnimationSpec(interval_ms=100, loop=True),
    AnimationName.WALK: AnimationSpec(interval_ms=100, loop=True),
}


@dataclass
class SetAnimation:
    """Presentation directive: show this animation from its first frame."""

    name: AnimationName
    frames: list[str] = field(default_factory=list)
    interval_ms: int = 100
    loop: bool = True

    @classmethod
    def for_animation(cls, name: AnimationName, frames: list[str]) -> "SetAnimation":
        """Build a directive using the animation's playback spec."""
        spec = ANIMATION_SPECS[name]
        return cls(
            name=name,
            frames=list(frames),
            interval_ms=spec.interval_ms,
            loop=spec.loop,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "type": "set",
            "name": self.name.value,
            "frames": self.frames,
            "interval": self.interval_ms,
            "loop": self.loop,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SetAnimation":
        """Create from dictionary."""
        return cls(
            name=AnimationName(data["name"]),
            frames=list(data.get("frames", [])),
            interval_ms=data.get("interval", 100),
            loop=data.get("loop", True),
        )


class Renderer(Protocol):
    """Consumer of presentation directives.

    Implementations load and cache frames and run the draw loop; the
    controller only tells them what to show.
    """

    def set_animation(self, directive: SetAnimation) -> None: ...


class FrameResolver(Protocol):
    """Source of ordered frame references for an animation.

    Must return an empty list, never raise, when frames are unavailable.
    """

    def resolve(self, name: AnimationName) -> list[str]: ...
