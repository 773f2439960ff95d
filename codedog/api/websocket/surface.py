"""WebSocket Surface - Connects a rendering client to a controller.

The client (an editor webview or a browser page) draws frames. It sends
activity signals as JSON text frames and receives SetAnimation directives:

    client -> server: {"type": "dogClicked"}
    server -> client: {"type": "set", "name": "Bark", "frames": [...], ...}

One controller exists per connected surface; it is started when the
socket is accepted and disposed (all timers cancelled) on disconnect.
"""

from __future__ import annotations

import asyncio
import random

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from codedog.animation.base import FrameResolver, SetAnimation
from codedog.config.settings import Settings
from codedog.controller.controller import AnimationController
from codedog.observability.logging import get_logger
from codedog.timing.scheduler import LoopScheduler

logger = get_logger(__name__)


class SurfaceWebSocket:
    """Renderer that forwards directives over a WebSocket.

    Directives are queued and sent by a background task so the controller
    never awaits network I/O. When the queue is full the oldest directive
    is dropped; only the latest one matters to the client.

    Usage:
        surface = SurfaceWebSocket(surface_id)
        await surface.connect(websocket)

        surface.set_animation(directive)

        await surface.disconnect()
    """

    def __init__(self, surface_id: str, queue_size: int = 16) -> None:
        self._surface_id = surface_id
        self._websocket: WebSocket | None = None
        self._connected = False
        self._send_queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._send_task: asyncio.Task | None = None

    @property
    def is_connected(self) -> bool:
        """Whether WebSocket is connected."""
        return self._connected

    @property
    def surface_id(self) -> str:
        """Surface identifier."""
        return self._surface_id

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and store WebSocket connection.

        Args:
            websocket: FastAPI WebSocket instance
        """
        await websocket.accept()
        self._websocket = websocket
        self._connected = True

        self._send_task = asyncio.create_task(self._send_loop())

        logger.info(
            "surface_ws_connected",
            surface_id=self._surface_id,
        )

    async def disconnect(self) -> None:
        """Disconnect WebSocket."""
        self._connected = False

        if self._send_task:
            self._send_task.cancel()
            try:
                await self._send_task
            except asyncio.CancelledError:
                pass
            self._send_task = None

        if self._websocket and self._websocket.client_state == WebSocketState.CONNECTED:
            try:
                await self._websocket.close()
            except RuntimeError:
                # Already closed by the peer
                pass

        logger.info(
            "surface_ws_disconnected",
            surface_id=self._surface_id,
        )

    def set_animation(self, directive: SetAnimation) -> None:
        """Queue a directive for the client."""
        if not self._connected:
            return

        message = directive.to_dict()
        try:
            self._send_queue.put_nowait(message)
        except asyncio.QueueFull:
            dropped = self._send_queue.get_nowait()
            self._send_queue.put_nowait(message)
            logger.debug(
                "surface_directive_dropped",
                surface_id=self._surface_id,
                animation=dropped.get("name"),
            )

    async def _send_loop(self) -> None:
        """Background loop to send queued directives."""
        while self._connected:
            try:
                message = await asyncio.wait_for(
                    self._send_queue.get(),
                    timeout=0.1,
                )

                if self._websocket and self._connected:
                    await self._websocket.send_json(message)

            except asyncio.TimeoutError:
                continue
            except WebSocketDisconnect:
                self._connected = False
                break
            except Exception as e:
                logger.warning(
                    "surface_send_error",
                    surface_id=self._surface_id,
                    error=str(e),
                )
                continue


class SurfaceSession:
    """A connected surface and the controller driving it."""

    def __init__(self, surface: SurfaceWebSocket, controller: AnimationController) -> None:
        self.surface = surface
        self.controller = controller

    @property
    def surface_id(self) -> str:
        return self.surface.surface_id


class SurfaceConnectionManager:
    """Manages surface WebSocket connections and their controllers.

    Usage:
        manager = SurfaceConnectionManager(settings, catalog)

        # New connection: accepts the socket and starts a controller
        session = await manager.connect(surface_id, websocket)

        # Inbound text frame
        session.controller.handle_message(text)

        # Disconnect: disposes the controller
        await manager.disconnect(surface_id)
    """

    def __init__(
        self,
        settings: Settings,
        frames: FrameResolver,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._frames = frames
        self._rng = rng
        self._sessions: dict[str, SurfaceSession] = {}

    async def connect(self, surface_id: str, websocket: WebSocket) -> SurfaceSession:
        """Accept the socket and start a controller for the surface.

        Args:
            surface_id: Surface identifier
            websocket: FastAPI WebSocket

        Returns:
            Connected surface session
        """
        # Disconnect existing if any
        await self.disconnect(surface_id)

        surface = SurfaceWebSocket(surface_id)
        await surface.connect(websocket)

        controller = AnimationController(
            renderer=surface,
            frames=self._frames,
            scheduler=LoopScheduler(),
            settings=self._settings,
            rng=self._rng,
            surface_id=surface_id,
        )
        controller.start()

        session = SurfaceSession(surface, controller)
        self._sessions[surface_id] = session
        return session

    async def disconnect(self, surface_id: str) -> None:
        """Dispose the surface's controller and close its socket.

        Args:
            surface_id: Surface identifier
        """
        session = self._sessions.pop(surface_id, None)
        if session:
            session.controller.dispose()
            await session.surface.disconnect()

    async def disconnect_all(self) -> None:
        """Disconnect all surfaces."""
        for surface_id in list(self._sessions.keys()):
            await self.disconnect(surface_id)

    def update_settings(self, settings: Settings) -> None:
        """Apply new settings to every running controller."""
        self._settings = settings
        for session in self._sessions.values():
            session.controller.update_settings(settings)

    @property
    def frames(self) -> FrameResolver:
        """Frame source shared by all controllers."""
        return self._frames

    def get(self, surface_id: str) -> SurfaceSession | None:
        """Session for a surface, if connected."""
        return self._sessions.get(surface_id)

    def is_connected(self, surface_id: str) -> bool:
        """Check if a surface has an active WebSocket."""
        session = self._sessions.get(surface_id)
        return session is not None and session.surface.is_connected

    @property
    def active_connections(self) -> int:
        """Number of active connections."""
        return len(self._sessions)
