"""Registry of every live WebSocket session, attached or not."""
from typing import TYPE_CHECKING, List, Set

if TYPE_CHECKING:
    from .session import ConnectionSession


class SessionRegistry:
    """Tracks open sessions so the liveness monitor can probe them."""

    def __init__(self) -> None:
        self._sessions: Set["ConnectionSession"] = set()

    def add(self, session: "ConnectionSession") -> None:
        self._sessions.add(session)

    def discard(self, session: "ConnectionSession") -> None:
        self._sessions.discard(session)

    def snapshot(self) -> List["ConnectionSession"]:
        return list(self._sessions)

    def __contains__(self, session: object) -> bool:
        return session in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
