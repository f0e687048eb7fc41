"""Gate relay WebSocket endpoint.

    WebSocket /ws?roomId=<id>&role=device|viewer

Both query parameters are optional; a client may instead send a
``register`` frame after connecting. See :mod:`smartgate.relay.protocol`
for the message set.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from smartgate.config import get_config
from smartgate.rooms.store import RoomStore

from .broadcast import BroadcastRelay
from .registry import SessionRegistry
from .session import ConnectionSession

logger = logging.getLogger(__name__)

router = APIRouter()

# Close code for frames above the configured size limit
CLOSE_MESSAGE_TOO_BIG = 1009


def get_store(websocket: WebSocket) -> RoomStore:
    return websocket.app.state.room_store  # type: ignore[attr-defined]


def get_sessions(websocket: WebSocket) -> SessionRegistry:
    return websocket.app.state.sessions  # type: ignore[attr-defined]


def get_relay(websocket: WebSocket) -> BroadcastRelay:
    return websocket.app.state.relay  # type: ignore[attr-defined]


@router.websocket("/ws")
async def websocket_gate_endpoint(
    websocket: WebSocket,
    roomId: Optional[str] = Query(None, description="Room to attach to on connect"),
    role: Optional[str] = Query(None, description="device or viewer"),
    store: RoomStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
    relay: BroadcastRelay = Depends(get_relay),
) -> None:
    """Serve one device or viewer connection for its whole lifetime.

    Protocol Flow:
        1. Connect with ?roomId=&role= -> {type: "registered"} or
           {type: "error"} (+ close 4001 if the room is unknown);
           connect without them -> {type: "info"}
        2. Client sends {type: "register"} if not attached yet
        3. Device sends {type: "gate_state"} -> relayed to viewers
        4. Viewer sends {type: "command"} -> relayed to devices
        5. Server sends {type: "ping"} periodically; clients that answer
           {type: "pong"} are held to it, others are covered by protocol pings
    """
    relay_settings = get_config().relay
    max_bytes = relay_settings.max_message_bytes

    await websocket.accept()
    session = ConnectionSession(
        websocket, store, relay, send_timeout=relay_settings.send_timeout_seconds
    )
    sessions.add(session)
    logger.debug(f"[WS] Session {session.id} connected (roomId={roomId}, role={role})")

    try:
        await session.open(roomId, role)

        while not session.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            size = len(raw.encode("utf-8")) if raw is not None else 0
            if raw is None:
                raw = message.get("bytes")
                if raw is None:
                    continue
                size = len(raw)

            if size > max_bytes:
                logger.info(f"[WS] Session {session.id} sent {size} bytes; closing")
                await session.close_socket(CLOSE_MESSAGE_TOO_BIG, "message too big")
                break

            await session.handle_frame(raw)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"[WS] Session {session.id} error: {e}")
    finally:
        sessions.discard(session)
        session.close()
