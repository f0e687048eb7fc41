"""Idle room garbage collection."""
import logging
from typing import List

from smartgate.timers import IntervalLoop

from .store import RoomStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_IDLE_SECONDS = 24 * 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 10 * 60


class IdleReaper(IntervalLoop):
    """Deletes rooms that are both empty and stale.

    A room with any attached session is kept however old its last activity
    is. Staleness is measured with the store's own clock.
    """

    name = "idle-reaper"

    def __init__(
        self,
        store: RoomStore,
        max_idle_seconds: float = DEFAULT_MAX_IDLE_SECONDS,
        interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        super().__init__(interval)
        self.store = store
        self.max_idle_seconds = max_idle_seconds

    def sweep(self) -> List[str]:
        """Delete every empty room idle past the threshold; return their ids."""
        now = self.store.clock()
        reaped = []
        for room_id, room in self.store.items():
            if room.is_empty and now - room.last_activity > self.max_idle_seconds:
                self.store.delete(room_id)
                reaped.append(room_id)
                logger.info("Cleaned idle room: %s", room_id)
        return reaped

    async def tick(self) -> None:
        self.sweep()
