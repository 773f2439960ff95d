"""Pytest configuration and shared fixtures."""

import os
import random
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing settings
os.environ.update({
    "CODEDOG_LOG_LEVEL": "WARNING",
    "CODEDOG_MEDIA_PATH": "tests/media-does-not-exist",
})

from codedog.animation.base import AnimationName, SetAnimation  # noqa: E402
from codedog.config.settings import Settings  # noqa: E402
from codedog.controller.controller import AnimationController  # noqa: E402
from codedog.timing.manual import ManualScheduler  # noqa: E402


class RecordingRenderer:
    """Renderer that keeps every directive it receives."""

    def __init__(self, on_directive: Callable[[SetAnimation], None] | None = None) -> None:
        self.directives: list[SetAnimation] = []
        self._on_directive = on_directive

    def set_animation(self, directive: SetAnimation) -> None:
        if self._on_directive:
            self._on_directive(directive)
        self.directives.append(directive)

    @property
    def names(self) -> list[AnimationName]:
        return [d.name for d in self.directives]

    def clear(self) -> None:
        self.directives.clear()


class StaticFrames:
    """Frame resolver with two fake frames per animation."""

    def __init__(self, missing: set[AnimationName] | None = None) -> None:
        self.missing = missing or set()

    def resolve(self, name: AnimationName) -> list[str]:
        if name in self.missing:
            return []
        return [f"/media/{name.value}/{name.value.lower()}_{i}.png" for i in (1, 2)]


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class Harness:
    """A started controller on virtual time."""

    def __init__(
        self,
        controller: AnimationController,
        scheduler: ManualScheduler,
        renderer: RecordingRenderer,
    ) -> None:
        self.controller = controller
        self.scheduler = scheduler
        self.renderer = renderer

    @property
    def names(self) -> list[AnimationName]:
        return self.renderer.names

    @property
    def state(self):
        return self.controller.state

    @property
    def now(self) -> int:
        return self.scheduler.now_ms()

    def send(self, signal) -> None:
        self.controller.dispatch(signal)

    def advance(self, ms: int) -> None:
        self.scheduler.advance(ms)

    def clear(self) -> None:
        self.renderer.clear()


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and .env files."""
    values = {
        "idle_timeout_ms": 10000,
        "enable_bark": True,
        "bark_delay_ms": 5000,
        "death_cooldown_ms": 5000,
        "idle_blink_probability": 0.3,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings instance."""
    return make_settings()


@pytest.fixture
def make_harness() -> Callable[..., Harness]:
    """Factory for a started controller on a ManualScheduler.

    rng_value 1.0 never blinks, 0.0 always blinks.
    warmup_ms advances time after start and clears the initial directive.
    """

    def factory(
        rng_value: float = 1.0,
        warmup_ms: int = 1000,
        missing: set[AnimationName] | None = None,
        renderer: RecordingRenderer | None = None,
        **settings_overrides,
    ) -> Harness:
        scheduler = ManualScheduler()
        renderer = renderer or RecordingRenderer()
        controller = AnimationController(
            renderer=renderer,
            frames=StaticFrames(missing),
            scheduler=scheduler,
            settings=make_settings(**settings_overrides),
            rng=FixedRandom(rng_value),
            surface_id="test-surface",
        )
        controller.start()
        harness = Harness(controller, scheduler, renderer)
        if warmup_ms:
            harness.advance(warmup_ms)
            harness.clear()
        return harness

    return factory


@pytest.fixture
def dog(make_harness) -> Harness:
    """Started controller at t=1000 with baseline IdleBlink and no directives recorded."""
    return make_harness()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide FastAPI test client with a fake frame source."""
    from codedog.api.routes import surfaces
    from codedog.api.websocket.surface import SurfaceConnectionManager
    from codedog.main import app

    surfaces.set_surface_manager(
        SurfaceConnectionManager(make_settings(), StaticFrames(), rng=FixedRandom(1.0))
    )
    try:
        with TestClient(app) as c:
            yield c
    finally:
        surfaces.set_surface_manager(None)
