"""Frame Catalog - Discovers animation frames on disk.

Layout: one directory per animation under the media root, named exactly
like the animation:

    media/
        Bark/dog_bark_1.png, dog_bark_2.png, ...
        Walk/walk_1.png, ...

Frames are ordered by the first number embedded in the file name, so
frame_10.png sorts after frame_9.png. Only files with the configured
extension are picked up (case-insensitive).
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

from codedog.animation.base import AnimationName
from codedog.observability.logging import get_logger

logger = get_logger(__name__)

_NUMBER_RE = re.compile(r"\d+")

# Maps a frame file to the reference handed to the renderer
FrameUriFactory = Callable[[AnimationName, Path], str]


def frame_sort_key(filename: str) -> tuple[int, str]:
    """Sort key: first embedded integer, then name for stable ties."""
    match = _NUMBER_RE.search(filename)
    return (int(match.group()) if match else 0, filename)


def default_uri_factory(name: AnimationName, path: Path) -> str:
    """Absolute file:// URI for a frame."""
    return path.resolve().as_uri()


class FrameCatalog:
    """Resolves animation names to ordered frame references.

    Results are cached per animation until reload() is called. A missing
    or unreadable directory yields an empty list and a warning.

    Usage:
        catalog = FrameCatalog("media")
        frames = catalog.resolve(AnimationName.WALK)
    """

    def __init__(
        self,
        root: str | Path,
        extension: str = ".png",
        uri_factory: FrameUriFactory | None = None,
    ) -> None:
        self._root = Path(root)
        self._extension = extension.lower()
        self._uri_factory = uri_factory or default_uri_factory
        self._cache: dict[AnimationName, list[str]] = {}

    @property
    def root(self) -> Path:
        """Media root directory."""
        return self._root

    def resolve(self, name: AnimationName) -> list[str]:
        """Ordered frame references for an animation (empty if none)."""
        frames = self._cache.get(name)
        if frames is None:
            frames = self._scan(name)
            self._cache[name] = frames
        return list(frames)

    def reload(self) -> None:
        """Forget cached results; the next resolve() rescans the disk."""
        self._cache.clear()

    def _scan(self, name: AnimationName) -> list[str]:
        directory = self._root / name.value

        try:
            files = [
                p for p in directory.iterdir()
                if p.is_file() and p.suffix.lower() == self._extension
            ]
        except FileNotFoundError:
            logger.warning(
                "animation_directory_missing",
                animation=name.value,
                path=str(directory),
            )
            return []
        except OSError as e:
            logger.warning(
                "animation_directory_unreadable",
                animation=name.value,
                path=str(directory),
                error=str(e),
            )
            return []

        if not files:
            logger.warning(
                "animation_frames_missing",
                animation=name.value,
                path=str(directory),
                extension=self._extension,
            )
            return []

        files.sort(key=lambda p: frame_sort_key(p.name))
        logger.debug("animation_frames_loaded", animation=name.value, count=len(files))
        return [self._uri_factory(name, p) for p in files]
