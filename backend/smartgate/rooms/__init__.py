"""Room registry, reservation endpoints and idle room cleanup."""
from .reaper import IdleReaper
from .store import Role, Room, RoomStore

__all__ = ["IdleReaper", "Role", "Room", "RoomStore"]
