"""WebSocket API package."""

from codedog.api.websocket.surface import (
    SurfaceConnectionManager,
    SurfaceSession,
    SurfaceWebSocket,
)

__all__ = [
    "SurfaceConnectionManager",
    "SurfaceSession",
    "SurfaceWebSocket",
]
