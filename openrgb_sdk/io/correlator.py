"""
Request/response correlation.

OpenRGB replies carry no sequence number, only the device ID and command ID of
the request they answer. Pending requests are therefore matched by the key
(device_id, command_id), oldest registration first.

Terms:
- Pending request = a registered expectation of a reply, with a future to resolve
- Broadcast = a packet the server sends unprompted (e.g. "device list updated")
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .framing import Packet


@dataclass
class PendingRequest:
    """A request waiting for its reply"""
    device_id: int
    command_id: int
    future: asyncio.Future = field(repr=False)

    def matches(self, packet: Packet) -> bool:
        return self.device_id == packet.device_id and self.command_id == packet.command_id


class RequestCorrelator:
    """
    FIFO of pending requests, resolved by packets from the framer.

    Packets whose command ID equals `broadcast_command` never touch the queue and
    are passed to `on_broadcast` instead. Packets with no matching pending request
    are dropped.
    """

    def __init__(self,
                 broadcast_command: Optional[int] = None,
                 on_broadcast: Optional[Callable[[Packet], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.broadcast_command = broadcast_command
        self.on_broadcast = on_broadcast
        self.logger = logger or logging.getLogger(__name__)
        self._pending: list[PendingRequest] = []

    def __len__(self) -> int:
        return len(self._pending)

    def register(self, device_id: int, command_id: int) -> PendingRequest:
        """Register interest in the next reply for (device_id, command_id). Must happen before the reply is read."""
        loop = asyncio.get_running_loop()
        pending = PendingRequest(device_id=device_id, command_id=command_id, future=loop.create_future())
        self._pending.append(pending)
        return pending

    def cancel(self, pending: PendingRequest):
        """Forget a pending request, e.g. once its deadline has passed"""
        try:
            self._pending.remove(pending)
        except ValueError:
            pass  # Already resolved
        if not pending.future.done():
            pending.future.cancel()

    def on_packet(self, packet: Packet) -> bool:
        """Route a packet. Returns True if it resolved a pending request or was a broadcast."""
        if self.broadcast_command is not None and packet.command_id == self.broadcast_command:
            if self.on_broadcast:
                self.on_broadcast(packet)
            return True

        # Requests whose awaiter gave up must not swallow a reply
        self._pending = [p for p in self._pending if not p.future.done()]

        for index, pending in enumerate(self._pending):
            if pending.matches(packet):
                del self._pending[index]
                pending.future.set_result(packet.payload)
                return True

        self.logger.debug(f"Dropping unmatched packet: device {packet.device_id} command {packet.command_id} ({packet.length} bytes)")
        return False

    def reject_all(self, exc: BaseException):
        """Fail every pending request, e.g. when the connection is lost"""
        pending, self._pending = self._pending, []
        for request in pending:
            if not request.future.done():
                request.future.set_exception(exc)
        if pending:
            self.logger.debug(f"Rejected {len(pending)} pending requests: {exc}")
