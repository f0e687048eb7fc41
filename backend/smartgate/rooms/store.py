"""In-memory room registry.

The store is the single source of truth for which rooms exist.  Rooms are
only ever created through :meth:`RoomStore.create_or_get`, which is reserved
for the REST reservation endpoints; the realtime path resolves rooms with
:meth:`RoomStore.get` and can therefore never materialize a room.

Thread Safety:
    Designed for a single asyncio event loop. Every mutation is a plain
    synchronous call, so a handler that does not ``await`` between reading
    and writing the store sees a consistent view. It is NOT thread-safe.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Role a connection plays inside a room.

    Attributes:
        DEVICE: The gate controller; reports gate state, receives commands.
        VIEWER: A remote monitor; issues commands, receives gate state.
    """
    DEVICE = "device"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Case-insensitive lookup; returns None for anything unknown."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(eq=False)
class Room:
    """A named pairing scope.

    The member sets hold live connection sessions by reference only; the
    room never owns or closes them.

    Attributes:
        id: Room identifier, unique in the store.
        last_activity: Monotonic timestamp of the last attach or relay.
        devices: Sessions attached with role ``device``.
        viewers: Sessions attached with role ``viewer``.
    """
    id: str
    last_activity: float
    devices: Set[Any] = field(default_factory=set)
    viewers: Set[Any] = field(default_factory=set)

    def members(self, role: Role) -> Set[Any]:
        return self.devices if role is Role.DEVICE else self.viewers

    @property
    def is_empty(self) -> bool:
        return not self.devices and not self.viewers


class RoomStore:
    """Owns the mapping from room id to :class:`Room`."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._rooms: Dict[str, Room] = {}

    def create_or_get(self, room_id: str) -> Room:
        """Return the room, inserting an empty one first if it is absent."""
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(id=room_id, last_activity=self.clock())
            self._rooms[room_id] = room
            logger.debug("Room %s created", room_id)
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def touch(self, room: Room) -> None:
        room.last_activity = self.clock()

    def delete(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)

    def size(self) -> int:
        return len(self._rooms)

    def items(self) -> List[Tuple[str, Room]]:
        """Snapshot of (id, room) pairs, safe to iterate while deleting."""
        return list(self._rooms.items())

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
