"""Wire protocol for the gate relay WebSocket.

Every frame carries exactly one JSON object with a ``type`` field.

Client -> server:
    register    {"type": "register", "roomId": "...", "role": "device|viewer"}
    gate_state  {"type": "gate_state", "gate": "OPEN|CLOSED"}     (device only)
    command     {"type": "command", "action": "OPEN|CLOSE"}       (viewer only)
    pong        {"type": "pong"}                    (reply to a liveness probe)

Server -> client:
    info        {"type": "info", "message": "..."}
    registered  {"type": "registered", "roomId": "...", "role": "..."}
    error       {"type": "error", "message": "..."}
    gate_state  {"type": "gate_state", "roomId": "...", "gate": "...", "ts": <ms>}
    command     {"type": "command", "roomId": "...", "action": "...", "ts": <ms>}
    ping        {"type": "ping", "ts": <ms>}

Gate values and actions are matched case-insensitively and always sent
upper-case.
"""
import json
import time
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from smartgate.rooms.store import Role

# Close code telling a client the room must be reserved before connecting
CLOSE_UNKNOWN_ROOM = 4001

INFO_MESSAGE = (
    'Send {"type":"register","roomId":"name-123","role":"device|viewer"} '
    "(room must exist) or connect with ?roomId=&role="
)
INVALID_REGISTER_MESSAGE = "register requires roomId and role=device|viewer"
UNKNOWN_ROOM_MESSAGE = "unknown roomId (create via /api/register first)"


class MessageType(str, Enum):
    REGISTER = "register"
    GATE_STATE = "gate_state"
    COMMAND = "command"
    PING = "ping"
    PONG = "pong"
    INFO = "info"
    REGISTERED = "registered"
    ERROR = "error"


class GateState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class GateAction(str, Enum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"


def now_ms() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# =============================================================================
# Outbound messages
# =============================================================================


class InfoMessage(BaseModel):
    type: MessageType = MessageType.INFO
    message: str = INFO_MESSAGE


class RegisteredMessage(BaseModel):
    type: MessageType = MessageType.REGISTERED
    roomId: str
    role: Role


class ErrorMessage(BaseModel):
    type: MessageType = MessageType.ERROR
    message: str


class GateStateMessage(BaseModel):
    """Gate state relayed from a device to the room's viewers."""
    type: MessageType = MessageType.GATE_STATE
    roomId: str
    gate: GateState
    ts: int = Field(default_factory=now_ms, description="Epoch milliseconds")


class CommandMessage(BaseModel):
    """Command relayed from a viewer to the room's devices."""
    type: MessageType = MessageType.COMMAND
    roomId: str
    action: GateAction
    ts: int = Field(default_factory=now_ms, description="Epoch milliseconds")


class PingMessage(BaseModel):
    type: MessageType = MessageType.PING
    ts: int = Field(default_factory=now_ms)


OutboundMessage = Union[BaseModel, Dict[str, Any]]


def encode(message: OutboundMessage) -> str:
    """Serialize an outbound message to a JSON text frame."""
    if isinstance(message, BaseModel):
        message = message.model_dump(mode="json")
    return json.dumps(message, separators=(",", ":"))


# =============================================================================
# Inbound helpers
# =============================================================================


def decode(raw: Union[str, bytes]) -> Optional[Dict[str, Any]]:
    """Parse a client frame; None for anything that is not a JSON object."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def parse_gate(value: Any) -> Optional[GateState]:
    if not isinstance(value, str):
        return None
    try:
        return GateState(value.upper())
    except ValueError:
        return None


def parse_action(value: Any) -> Optional[GateAction]:
    if not isinstance(value, str):
        return None
    try:
        return GateAction(value.upper())
    except ValueError:
        return None
