"""Fixed-period background loops run on the application's event loop."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class IntervalLoop(ABC):
    """Calls :meth:`tick` every ``interval`` seconds until stopped.

    A failing tick is logged and the loop keeps going; only cancellation
    (via :meth:`stop`) ends it.
    """

    name = "interval-loop"

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @abstractmethod
    async def tick(self) -> None:
        """Run one period's work."""

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info("Started %s (every %ss)", self.name, self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped %s", self.name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception:
                logger.exception("%s tick failed", self.name)
