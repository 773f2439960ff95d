"""Health check endpoints.

- /healthz: Liveness probe
- /readyz: Readiness probe. The service is ready once startup finished
  and the catalog can draw IdleBlink, the first directive every surface
  receives. Other animations without frames are reported but only cause
  skipped directives, so they do not block readiness.
- /metrics: Prometheus metrics endpoint
"""

from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from codedog.animation.base import AnimationName
from codedog.api.routes import surfaces

router = APIRouter(tags=["health"])


@dataclass
class ServiceStatus:
    """What the lifespan learned at startup."""

    started: bool = False
    accepting_surfaces: bool = False
    missing_animations: list[str] = field(default_factory=list)

    @property
    def idle_frames(self) -> bool:
        return AnimationName.IDLE_BLINK.value not in self.missing_animations

    @property
    def ready(self) -> bool:
        return self.started and self.accepting_surfaces and self.idle_frames


_status = ServiceStatus()


def mark_started(missing_animations: list[str]) -> None:
    """Record a finished startup and the catalog's coverage."""
    global _status
    _status = ServiceStatus(
        started=True,
        accepting_surfaces=True,
        missing_animations=sorted(missing_animations),
    )


def mark_stopping() -> None:
    """Stop accepting surfaces during shutdown."""
    _status.accepting_surfaces = False
    _status.started = False


def get_status() -> ServiceStatus:
    return _status


@router.get("/healthz", response_model=dict[str, str])
async def healthz() -> dict[str, str]:
    """Liveness probe.

    Returns 200 if the process is alive.
    """
    return {"status": "alive"}


@router.get("/readyz")
async def readyz(response: Response) -> dict[str, Any]:
    """Readiness probe.

    Returns 200 when a connecting surface would see the dog, 503 otherwise.
    """
    current = _status
    body = {
        "status": "ready" if current.ready else "not_ready",
        "catalog": {
            "idle_frames": current.idle_frames,
            "missing_animations": current.missing_animations,
        },
        "surfaces": {
            "accepting": current.accepting_surfaces,
            "active": surfaces.get_surface_manager().active_connections,
        },
    }
    if not current.ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return body


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
