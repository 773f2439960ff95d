"""Tests for the surface WebSocket.

Tests cover:
- SurfaceWebSocket connection/disconnection
- Directive queuing and sending
- SurfaceConnectionManager controller lifecycle
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from starlette.websockets import WebSocketState

from codedog.animation.base import AnimationName, SetAnimation
from codedog.api.websocket.surface import SurfaceConnectionManager, SurfaceWebSocket

from conftest import FixedRandom, StaticFrames, make_settings


def _directive(name: AnimationName) -> SetAnimation:
    return SetAnimation.for_animation(name, ["a.png"])


def _manager() -> SurfaceConnectionManager:
    return SurfaceConnectionManager(make_settings(), StaticFrames(), rng=FixedRandom(1.0))


class TestSurfaceWebSocket:
    """Tests for SurfaceWebSocket class."""

    def test_init(self):
        """Test initialization."""
        ws = SurfaceWebSocket(surface_id="test-surface")
        assert ws.surface_id == "test-surface"
        assert ws.is_connected is False

    @pytest.mark.asyncio
    async def test_connect(self):
        """Test WebSocket connection."""
        ws = SurfaceWebSocket(surface_id="test-surface")
        mock_websocket = AsyncMock()

        await ws.connect(mock_websocket)

        assert ws.is_connected is True
        mock_websocket.accept.assert_called_once()

        await ws.disconnect()

    @pytest.mark.asyncio
    async def test_disconnect_closes_socket(self):
        """Disconnect closes a connected socket."""
        ws = SurfaceWebSocket(surface_id="test-surface")
        mock_websocket = AsyncMock()
        mock_websocket.client_state = WebSocketState.CONNECTED

        await ws.connect(mock_websocket)
        await ws.disconnect()

        assert ws.is_connected is False
        mock_websocket.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_disconnect_already_disconnected(self):
        """Disconnect when never connected is safe."""
        ws = SurfaceWebSocket(surface_id="test-surface")

        await ws.disconnect()
        assert ws.is_connected is False

    @pytest.mark.asyncio
    async def test_directive_sent_as_json(self):
        """Queued directive reaches the socket in wire form."""
        ws = SurfaceWebSocket(surface_id="test-surface")
        mock_websocket = AsyncMock()
        await ws.connect(mock_websocket)

        ws.set_animation(_directive(AnimationName.WALK))
        await asyncio.sleep(0.05)
        await ws.disconnect()

        mock_websocket.send_json.assert_called_once_with({
            "type": "set",
            "name": "Walk",
            "frames": ["a.png"],
            "interval": 100,
            "loop": True,
        })

    def test_set_animation_when_not_connected(self):
        """Directives are dropped when not connected."""
        ws = SurfaceWebSocket(surface_id="test-surface")

        ws.set_animation(_directive(AnimationName.WALK))

        assert ws._send_queue.qsize() == 0

    @pytest.mark.asyncio
    async def test_queue_full_drops_oldest(self):
        """The newest directive always survives a full queue."""
        ws = SurfaceWebSocket(surface_id="test-surface", queue_size=2)
        ws._connected = True  # queue without a send loop

        ws.set_animation(_directive(AnimationName.WALK))
        ws.set_animation(_directive(AnimationName.SNIFF))
        ws.set_animation(_directive(AnimationName.BARK))

        queued = [ws._send_queue.get_nowait()["name"] for _ in range(2)]
        assert queued == ["Sniff", "Bark"]

    @pytest.mark.asyncio
    async def test_send_error_keeps_loop_alive(self):
        """A failed send does not stop later sends."""
        ws = SurfaceWebSocket(surface_id="test-surface")
        mock_websocket = AsyncMock()
        mock_websocket.send_json.side_effect = [RuntimeError("boom"), None]
        await ws.connect(mock_websocket)

        ws.set_animation(_directive(AnimationName.WALK))
        ws.set_animation(_directive(AnimationName.RUN))
        await asyncio.sleep(0.05)
        await ws.disconnect()

        assert mock_websocket.send_json.call_count == 2


class TestSurfaceConnectionManager:
    """Tests for SurfaceConnectionManager class."""

    def test_init(self):
        """Test initialization."""
        assert _manager().active_connections == 0

    @pytest.mark.asyncio
    async def test_connect_starts_controller(self):
        """Connecting starts a controller that shows IdleBlink."""
        manager = _manager()
        mock_websocket = AsyncMock()

        session = await manager.connect("surface-1", mock_websocket)
        await asyncio.sleep(0.05)

        assert manager.is_connected("surface-1") is True
        assert session.controller.is_running is True
        assert session.controller.current_animation is AnimationName.IDLE_BLINK
        assert mock_websocket.send_json.call_args.args[0]["name"] == "IdleBlink"

        await manager.disconnect_all()

    @pytest.mark.asyncio
    async def test_disconnect_disposes_controller(self):
        """Disconnect disposes the controller."""
        manager = _manager()
        session = await manager.connect("surface-1", AsyncMock())

        await manager.disconnect("surface-1")

        assert session.controller.is_running is False
        assert session.controller.state is None
        assert manager.get("surface-1") is None
        assert manager.is_connected("surface-1") is False

    @pytest.mark.asyncio
    async def test_reconnect_replaces_session(self):
        """A second connect for the same surface disposes the first."""
        manager = _manager()
        first = await manager.connect("surface-1", AsyncMock())
        second = await manager.connect("surface-1", AsyncMock())

        assert first.controller.is_running is False
        assert manager.get("surface-1") is second
        assert manager.active_connections == 1

        await manager.disconnect_all()

    @pytest.mark.asyncio
    async def test_multiple_surfaces(self):
        """Each surface gets its own controller."""
        manager = _manager()
        a = await manager.connect("a", AsyncMock())
        b = await manager.connect("b", AsyncMock())

        assert a.controller is not b.controller
        assert manager.active_connections == 2

        await manager.disconnect_all()
        assert manager.active_connections == 0

    @pytest.mark.asyncio
    async def test_update_settings_reaches_controllers(self):
        """New settings apply to running controllers."""
        manager = _manager()
        session = await manager.connect("surface-1", AsyncMock())

        manager.update_settings(make_settings(enable_bark=False))

        assert session.controller.settings.enable_bark is False

        await manager.disconnect_all()

    @pytest.mark.asyncio
    async def test_disconnect_unknown_surface(self):
        """Disconnecting an unknown surface is a no-op."""
        manager = _manager()

        await manager.disconnect("missing")
