"""Animation package - Names, playback specs, directives and frame discovery.

Provides:
- The closed set of animations and their frame timing
- SetAnimation directives for the renderer
- Directory-backed frame catalog
"""

from codedog.animation.base import (
    ANIMATION_SPECS,
    AnimationName,
    AnimationSpec,
    FrameResolver,
    Renderer,
    SetAnimation,
)
from codedog.animation.catalog import (
    FrameCatalog,
    default_uri_factory,
    frame_sort_key,
)

__all__ = [
    # Base
    "ANIMATION_SPECS",
    "AnimationName",
    "AnimationSpec",
    "FrameResolver",
    "Renderer",
    "SetAnimation",
    # Catalog
    "FrameCatalog",
    "default_uri_factory",
    "frame_sort_key",
]
