"""Post-commit notifications delivered through the Socket.IO server."""
from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

import socketio
from fastapi.encoders import jsonable_encoder

from ..config import get_settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can push an event to a real-time room."""

    async def publish(self, room: UUID | str, event: str, payload: dict[str, Any]) -> None:
        ...


class SocketIONotifier:
    """Emit events to Socket.IO rooms.

    Delivery is best effort: the database work behind an event has already
    committed, so emission failures are logged and never raised.
    """

    def __init__(self, server: socketio.AsyncServer) -> None:
        self._server = server

    async def publish(self, room: UUID | str, event: str, payload: dict[str, Any]) -> None:
        try:
            await self._server.emit(event, jsonable_encoder(payload), room=str(room))
        except Exception:
            logger.warning("Failed to emit %s to room %s", event, room, exc_info=True)


def create_socket_server() -> socketio.AsyncServer:
    settings = get_settings()
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=[settings.frontend_url],
        logger=False,
        engineio_logger=False,
    )


socket_server = create_socket_server()
_notifier = SocketIONotifier(socket_server)


def get_notifier() -> Notifier:
    """FastAPI dependency returning the process-wide notifier."""

    return _notifier


__all__ = ["Notifier", "SocketIONotifier", "create_socket_server", "socket_server", "get_notifier"]
