"""Per-connection state machine for the gate relay.

A session moves through three states:

    UNATTACHED --attach--> ATTACHED --close--> CLOSED
         |                                       ^
         +-----------------close-----------------+

Attachment happens at most once, either from the connection's query
parameters or from the first ``register`` frame. While attached, frames are
dispatched by role: devices publish ``gate_state`` to viewers, viewers
publish ``command`` to devices. Everything else is ignored without a reply.

Concurrency Notes:
    Every read-modify-write of the room store or a member set happens in a
    stretch of code with no ``await`` in it; sends only happen afterwards.
    On a single event loop this is the only synchronization needed.
"""
import asyncio
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Union

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from smartgate.rooms.store import Role, RoomStore

from . import protocol
from .broadcast import BroadcastRelay
from .protocol import (
    CommandMessage,
    ErrorMessage,
    GateStateMessage,
    InfoMessage,
    MessageType,
    OutboundMessage,
    PingMessage,
    RegisteredMessage,
)

logger = logging.getLogger(__name__)

# Close code used when the liveness monitor drops a silent peer
CLOSE_GOING_AWAY = 1001

# Upper bound on a single write or close; a stuck peer must not stall callers
DEFAULT_SEND_TIMEOUT_SECONDS = 10.0


class SessionState(str, Enum):
    UNATTACHED = "unattached"
    ATTACHED = "attached"
    CLOSED = "closed"


class ConnectionSession:
    """One client connection and its room/role binding.

    Attributes:
        id: Short identifier used in log lines.
        websocket: The underlying connection.
        room_id: Attached room, or None.
        role: Attached role, or None.
        is_alive: Liveness flag; cleared by each probe, set by any inbound
            frame.
        answers_probes: True once the client has sent a ``pong``. Only such
            clients can be terminated by the liveness monitor; the others
            rely on the server's protocol-level pings.
        send_timeout: Seconds a single write or close may take.
    """

    def __init__(
        self,
        websocket: WebSocket,
        store: RoomStore,
        relay: BroadcastRelay,
        send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.websocket = websocket
        self.store = store
        self.relay = relay
        self.room_id: Optional[str] = None
        self.role: Optional[Role] = None
        self.send_timeout = send_timeout
        self.is_alive = True
        self.answers_probes = False
        self._closed = False

    def __repr__(self) -> str:
        return f"<ConnectionSession {self.id} {self.state.value} room={self.room_id} role={self.role}>"

    @property
    def state(self) -> SessionState:
        if self._closed:
            return SessionState.CLOSED
        if self.room_id is not None and self.role is not None:
            return SessionState.ATTACHED
        return SessionState.UNATTACHED

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_open(self) -> bool:
        """True while frames can still be written to the connection."""
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    # =========================================================================
    # Sending
    # =========================================================================

    async def send_text(self, raw: str) -> bool:
        """Write a pre-encoded frame; returns False instead of raising."""
        try:
            await asyncio.wait_for(self.websocket.send_text(raw), self.send_timeout)
            return True
        except Exception as e:
            logger.debug(f"Failed to send to session {self.id}: {e}")
            return False

    async def send(self, message: OutboundMessage) -> bool:
        return await self.send_text(protocol.encode(message))

    async def probe(self) -> bool:
        """Send a liveness probe. The caller is responsible for the flag."""
        return await self.send(PingMessage())

    def mark_alive(self) -> None:
        self.is_alive = True

    # =========================================================================
    # Attach protocol
    # =========================================================================

    async def open(self, room_id: Optional[str], role: Optional[str]) -> bool:
        """Handle the connection parameters right after accept.

        With neither parameter, the client gets usage info and may register
        later. With either one present, attachment is attempted and an
        unknown room closes the connection with 4001.
        """
        if not room_id and not role:
            await self.send(InfoMessage())
            return False
        return await self.attach(room_id, role, on_connect=True)

    async def attach(self, room_id: Any, role: Any, *, on_connect: bool = False) -> bool:
        """Bind this session to an existing room under *role*.

        Args:
            room_id: Requested room ID (trimmed; must be non-empty).
            role: ``device`` or ``viewer``, case-insensitive.
            on_connect: True when the values came from the connection
                parameters; an unknown room then also closes the socket.

        Returns:
            True if the session is now attached by this call.
        """
        if self.state is not SessionState.UNATTACHED:
            return False

        rid = room_id.strip() if isinstance(room_id, str) else ""
        parsed_role = Role.parse(role)
        if not rid or parsed_role is None:
            await self.send(ErrorMessage(message=protocol.INVALID_REGISTER_MESSAGE))
            return False

        # Realtime path: resolve only, never create
        room = self.store.get(rid)
        if room is None:
            logger.info(f"[WS] Session {self.id} rejected: unknown room {rid}")
            await self.send(ErrorMessage(message=protocol.UNKNOWN_ROOM_MESSAGE))
            if on_connect:
                await self.close_socket(protocol.CLOSE_UNKNOWN_ROOM, "unknown room")
            return False

        room.members(parsed_role).add(self)
        self.room_id = rid
        self.role = parsed_role
        self.store.touch(room)
        logger.info(f"[WS] {parsed_role.value} joined room: {rid}")

        await self.send(RegisteredMessage(roomId=rid, role=parsed_role))
        return True

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def handle_frame(self, raw: Union[str, bytes]) -> None:
        """Process one inbound frame. Never raises for bad client input."""
        # Any frame proves the peer is reading and writing
        self.mark_alive()

        data = protocol.decode(raw)
        if data is None:
            return

        message_type = data.get("type")

        if message_type == MessageType.PONG.value:
            self.answers_probes = True
            return

        if message_type == MessageType.REGISTER.value:
            if self.state is SessionState.UNATTACHED:
                await self.attach(data.get("roomId"), data.get("role"))
            return

        if self.state is not SessionState.ATTACHED:
            return

        room = self.store.get(self.room_id)
        if room is None:
            return

        # DEVICE -> VIEWERS
        if message_type == MessageType.GATE_STATE.value and self.role is Role.DEVICE:
            gate = protocol.parse_gate(data.get("gate"))
            if gate is None:
                return
            self.store.touch(room)
            logger.debug("[WS] gate_state %s in room %s", gate.value, self.room_id)
            await self.relay.deliver(
                room.viewers, GateStateMessage(roomId=self.room_id, gate=gate)
            )
            return

        # VIEWER -> DEVICES
        if message_type == MessageType.COMMAND.value and self.role is Role.VIEWER:
            action = protocol.parse_action(data.get("action"))
            if action is None:
                return
            self.store.touch(room)
            logger.debug("[WS] command %s in room %s", action.value, self.room_id)
            await self.relay.deliver(
                room.devices, CommandMessage(roomId=self.room_id, action=action)
            )
            return

    # =========================================================================
    # Teardown
    # =========================================================================

    def close(self) -> None:
        """Detach from the room (if any) and mark the session closed.

        Idempotent, and safe when the room has already been reaped. Does not
        refresh the room's last activity.
        """
        if self._closed:
            return
        self._closed = True

        if self.room_id is None or self.role is None:
            return
        room = self.store.get(self.room_id)
        if room is None:
            return
        room.devices.discard(self)
        room.viewers.discard(self)
        logger.info(f"[WS] {self.role.value} left room: {self.room_id}")

    async def close_socket(self, code: int, reason: str = "") -> None:
        """Run close cleanup, then close the underlying connection."""
        self.close()
        try:
            await asyncio.wait_for(
                self.websocket.close(code=code, reason=reason), self.send_timeout
            )
        except Exception as e:
            logger.debug(f"Error closing session {self.id}: {e}")

    async def terminate(self) -> None:
        """Drop an unresponsive peer without sending it anything."""
        await self.close_socket(CLOSE_GOING_AWAY, "liveness timeout")
