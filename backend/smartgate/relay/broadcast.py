"""Best-effort fan-out of relay messages to a room's member set."""
import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

from .protocol import OutboundMessage, encode

if TYPE_CHECKING:
    from .session import ConnectionSession

logger = logging.getLogger(__name__)


class BroadcastRelay:
    """Delivers one message to every open session in a target set.

    Delivery is fire-and-forget: there is no acknowledgement or retry, a
    failure on one recipient is logged and ignored, and the target set is
    never modified here. Disconnect cleanup belongs to the session.
    """

    async def deliver(
        self, targets: Iterable["ConnectionSession"], message: OutboundMessage
    ) -> int:
        """Send *message* to each open session in *targets*.

        The set is snapshotted before the first send, so sessions attaching
        or leaving during delivery do not affect this fan-out.

        Returns:
            Number of sessions the frame was written to.
        """
        raw = encode(message)
        recipients = [session for session in list(targets) if session.is_open]
        if not recipients:
            return 0

        results = await asyncio.gather(
            *[session.send_text(raw) for session in recipients],
            return_exceptions=True,
        )
        delivered = sum(1 for ok in results if ok is True)
        logger.debug("Relayed frame to %d/%d recipients", delivered, len(recipients))
        return delivered
