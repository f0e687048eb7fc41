"""Realtime relay between gate devices and viewers."""
from .broadcast import BroadcastRelay
from .liveness import LivenessMonitor
from .registry import SessionRegistry
from .session import ConnectionSession, SessionState

__all__ = [
    "BroadcastRelay",
    "ConnectionSession",
    "LivenessMonitor",
    "SessionRegistry",
    "SessionState",
]
