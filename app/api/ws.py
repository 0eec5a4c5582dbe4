"""
WebSocket API Routes - real-time progress updates.

A client opens ``/api/ws/progress?token=<jwt>`` once after login and keeps
the connection for the whole session. The upload and analysis pipelines push
their progress events to the connection's per-user room; nothing the client
sends is interpreted.
"""

import uuid

from fastapi import APIRouter, Query, WebSocket, status
from starlette.websockets import WebSocketState

from app.dependencies.auth import identity_from_token
from app.dependencies.realtime import hub_from_app
from app.utils.logger import setup_logger

logger = setup_logger("api.ws")

router = APIRouter(prefix="/api")


@router.websocket("/ws/progress")
async def websocket_progress(
    websocket: WebSocket,
    token: str | None = Query(None),
):
    """
    Realtime progress channel for the authenticated user.

    Connections without a valid token are refused before the handshake
    completes.
    """
    connection_id = str(uuid.uuid4())
    identity = identity_from_token(token)
    if identity is None:
        logger.warning(
            f"[WS {connection_id}] Rejected connection without a valid token."
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub = hub_from_app(websocket)
    if hub is None:
        logger.critical(f"[WS {connection_id}] Realtime hub is not initialized.")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    room = str(identity.id)
    await websocket.accept()
    hub.join(room, websocket)
    logger.info(f"[WS {connection_id}] User {room} connected.")

    try:
        while True:
            # Incoming frames, text or binary, are ignored.
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
        logger.info(f"[WS {connection_id}] User {room} disconnected.")
    finally:
        hub.leave(room, websocket)
        if websocket.client_state != WebSocketState.DISCONNECTED:
            try:
                await websocket.close()
            except RuntimeError as e_close:
                logger.warning(
                    f"[WS {connection_id}] Error during WebSocket close: {e_close}"
                )
