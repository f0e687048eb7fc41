"""Heartbeat-based dead peer detection.

Each tick, every open session gets an application-level ``ping``. A session
that has shown it answers these (by sending a ``pong`` at least once) and
has sent nothing since the previous tick is terminated, so such a peer is
dropped within two heartbeat periods. Clients that never answer are left to
the protocol-level pings the ASGI server sends on the same period.
"""
import asyncio
import logging
from typing import List, Tuple

from smartgate.timers import IntervalLoop

from .registry import SessionRegistry
from .session import ConnectionSession

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL_SECONDS = 30.0


class LivenessMonitor(IntervalLoop):
    """Probes all registered sessions on a fixed period."""

    name = "liveness-monitor"

    def __init__(
        self,
        registry: SessionRegistry,
        interval: float = DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
    ) -> None:
        super().__init__(interval)
        self.registry = registry

    def sweep(self) -> Tuple[List[ConnectionSession], List[ConnectionSession]]:
        """Split sessions into (dead, probed) and update state for both.

        Dead sessions (silent since the last probe, and known to answer
        probes) are detached from their rooms and unregistered here;
        probed sessions have their liveness flag cleared. No I/O happens in
        this method.
        """
        dead: List[ConnectionSession] = []
        probed: List[ConnectionSession] = []
        for session in self.registry.snapshot():
            if session.closed:
                self.registry.discard(session)
                continue
            if not session.is_alive and session.answers_probes:
                session.close()
                self.registry.discard(session)
                dead.append(session)
                logger.info(f"[WS] Terminating unresponsive session {session.id}")
                continue
            session.is_alive = False
            probed.append(session)
        return dead, probed

    async def tick(self) -> None:
        dead, probed = self.sweep()
        if not dead and not probed:
            return
        await asyncio.gather(
            *[session.terminate() for session in dead],
            *[session.probe() for session in probed],
            return_exceptions=True,
        )
