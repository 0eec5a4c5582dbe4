"""
Realtime progress channel built on FastAPI WebSockets.

Connections are grouped into rooms keyed by user id. Emitting to a room is
fire-and-forget: nothing is acknowledged, a failed send just drops that
connection, and callers never see an exception.
"""

from collections import defaultdict
from datetime import UTC, datetime
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from websockets.exceptions import ConnectionClosed

from app.utils.logger import setup_logger

logger = setup_logger("realtime")

FILE_PROCESSING_PROGRESS = "file_processing_progress"
AI_ANALYSIS_PROGRESS = "ai_analysis_progress"
PROCESSING_ERROR = "processing_error"


class RealtimeHub:
    """Registry of live WebSocket connections, one room per user identity."""

    def __init__(self):
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)

    def join(self, room: str, websocket: WebSocket) -> None:
        self._rooms[room].add(websocket)
        logger.info(
            f"Connection joined room {room} ({len(self._rooms[room])} active)"
        )

    def leave(self, room: str, websocket: WebSocket) -> None:
        connections = self._rooms.get(room)
        if not connections:
            return
        connections.discard(websocket)
        if not connections:
            del self._rooms[room]
        logger.info(f"Connection left room {room}")

    def connection_count(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> int:
        """
        Push ``event`` to every connection in ``room``.

        Returns the number of connections the frame was handed to.
        """
        connections = list(self._rooms.get(room, ()))
        if not connections:
            logger.debug(f"No listeners in room {room} for '{event}'")
            return 0

        frame = {
            "event": event,
            "data": payload,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        delivered = 0
        for websocket in connections:
            if websocket.client_state != WebSocketState.CONNECTED:
                self.leave(room, websocket)
                continue
            try:
                await websocket.send_json(frame)
                delivered += 1
            except (WebSocketDisconnect, ConnectionClosed, RuntimeError, OSError) as e:
                logger.warning(f"Failed to push '{event}' to room {room}: {e}")
                self.leave(room, websocket)
        return delivered
