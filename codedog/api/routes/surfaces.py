"""Surface API Routes - Rendering clients and out-of-band signals.

Provides:
- WebSocket endpoint a rendering client connects to
- Surface status
- HTTP signal injection (for event sources without a socket, e.g. git hooks)
- Named commands
"""

from typing import Any

from fastapi import (
    APIRouter,
    Body,
    HTTPException,
    WebSocket,
    status,
)
from pydantic import BaseModel, Field

from codedog.animation.base import AnimationName
from codedog.animation.catalog import FrameCatalog
from codedog.api.websocket.surface import SurfaceConnectionManager, SurfaceSession
from codedog.config.settings import get_settings
from codedog.observability.logging import bind_surface, unbind_surface

router = APIRouter(tags=["surfaces"])

MEDIA_URL_PREFIX = "/media"

# Global manager (created lazily, replaceable for tests)
_surface_manager: SurfaceConnectionManager | None = None


def media_uri(name: AnimationName, path) -> str:
    """URL under which the app serves a frame file."""
    return f"{MEDIA_URL_PREFIX}/{name.value}/{path.name}"


def get_surface_manager() -> SurfaceConnectionManager:
    """Get global surface connection manager."""
    global _surface_manager
    if _surface_manager is None:
        settings = get_settings()
        catalog = FrameCatalog(
            settings.media_path,
            extension=settings.frame_extension,
            uri_factory=media_uri,
        )
        _surface_manager = SurfaceConnectionManager(settings, catalog)
    return _surface_manager


def set_surface_manager(manager: SurfaceConnectionManager | None) -> None:
    """Replace the global surface manager."""
    global _surface_manager
    _surface_manager = manager


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------


class SurfaceStatusResponse(BaseModel):
    """Surface status."""

    surface_id: str
    connected: bool
    state: dict[str, Any] = Field(default_factory=dict)


class SignalAcceptedResponse(BaseModel):
    """Signal accepted."""

    surface_id: str
    current_animation: str | None = None


def _require_session(surface_id: str) -> SurfaceSession:
    session = get_surface_manager().get(surface_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Surface not connected: {surface_id}",
        )
    return session


def _accepted(session: SurfaceSession) -> SignalAcceptedResponse:
    current = session.controller.current_animation
    return SignalAcceptedResponse(
        surface_id=session.surface_id,
        current_animation=current.value if current else None,
    )


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@router.get("/surfaces/{surface_id}", response_model=SurfaceStatusResponse)
async def get_surface(surface_id: str) -> SurfaceStatusResponse:
    """Get surface status and controller state."""
    session = _require_session(surface_id)
    state = session.controller.state
    return SurfaceStatusResponse(
        surface_id=surface_id,
        connected=session.surface.is_connected,
        state=state.to_dict() if state else {},
    )


@router.post("/surfaces/{surface_id}/signals", response_model=SignalAcceptedResponse)
async def post_signal(
    surface_id: str,
    payload: dict[str, Any] = Body(...),
) -> SignalAcceptedResponse:
    """Inject one activity signal, in wire form."""
    session = _require_session(surface_id)
    if not session.controller.handle_message(payload):
        raise HTTPException(
            status_code=422,
            detail="Invalid signal",
        )
    return _accepted(session)


@router.post("/surfaces/{surface_id}/commands/{command}", response_model=SignalAcceptedResponse)
async def post_command(surface_id: str, command: str) -> SignalAcceptedResponse:
    """Run a named command (codedog.testRun, codedog.testBite)."""
    session = _require_session(surface_id)
    if not session.controller.run_command(command):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown command: {command}",
        )
    return _accepted(session)


@router.websocket("/ws/{surface_id}")
async def surface_websocket(websocket: WebSocket, surface_id: str) -> None:
    """WebSocket endpoint for a rendering surface.

    Text or binary frames are signals in wire form; "ping" is answered
    with "pong".
    """
    manager = get_surface_manager()
    session = await manager.connect(surface_id, websocket)
    bind_surface(surface_id)

    try:
        while session.surface.is_connected:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            data = message.get("text")
            if data is None:
                data = message.get("bytes") or b""

            if data == "ping":
                await websocket.send_text("pong")
                continue

            session.controller.handle_message(data)

    finally:
        unbind_surface()
        # A reconnect may already have replaced this session
        if manager.get(surface_id) is session:
            await manager.disconnect(surface_id)
