"""
OpenRGB wire-level client.

This module implements the transport side of the OpenRGB SDK protocol using asyncio.
It contains the OpenRGBClient class for sending packets and awaiting replies over
one persistent TCP connection.

Terms:
- Request = A packet sent by the Client to the server
- Reply = The packet the server sends back for a Request, with the same device and command ID
- Broadcast = A packet sent by the server without a Request (device list updated)

Example usage:
async def main():
    client = await OpenRGBClient.create(("127.0.0.1", 6742))
    async with client:
        payload = await client.request(0, Command.REQUEST_CONTROLLER_COUNT, timeout=1.0)
        print("Controllers:", int.from_bytes(payload, "little"))

asyncio.run(main())
"""

import asyncio
import logging
from typing import Callable, Optional, Self, Tuple

from .framing import PacketFramer, Packet, encode_packet
from .correlator import RequestCorrelator, PendingRequest
from ..exceptions import (OpenRGBConnectionError, OpenRGBDisconnectedError,
                          OpenRGBMalformedHeaderError, OpenRGBTimeoutError)


class ClientConst:
    """Constants for the OpenRGBClient"""
    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 6742
    CONNECT_TIMEOUT = 1.0


class OpenRGBStreamProtocol(asyncio.Protocol):
    def __init__(self, data_handler, lost_handler, logger: Optional[logging.Logger] = None):
        self.data_handler = data_handler
        self.lost_handler = lost_handler
        self.logger = logger or logging.getLogger(__name__)
        self.transport: Optional[asyncio.Transport] = None

    def connection_made(self, transport):
        self.transport = transport

    def data_received(self, data):
        # Framing and correlation run to completion before control returns to the loop
        self.data_handler(data)

    def connection_lost(self, exc):
        if exc:
            self.logger.error(f"Connection lost: {exc}")
        else:
            self.logger.info("Connection closed")
        self.lost_handler(exc)


class OpenRGBClient:
    """
    Header: ["ORGB", device_id:u32, command_id:u32, length:u32] then `length` payload bytes
      - all integers little-endian
      - replies are matched to requests by (device_id, command_id), oldest first
      - a malformed header resynchronises the stream, or fails the connection if strict_framing
    """

    def __init__(self,
                 server: Tuple[str, int],
                 broadcast_command: Optional[int] = None,
                 on_broadcast: Optional[Callable[[Packet], None]] = None,
                 strict_framing: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.server = server
        self.logger = logger or logging.getLogger(__name__)
        self.framer = PacketFramer(strict=strict_framing, logger=self.logger)
        self.correlator = RequestCorrelator(broadcast_command=broadcast_command, on_broadcast=on_broadcast, logger=self.logger)
        self.on_send: Optional[Callable[[Packet], None]] = None
        self.on_receive: Optional[Callable[[Packet], None]] = None
        self.on_disconnect: Optional[Callable[[Optional[Exception]], None]] = None
        self._transport: Optional[asyncio.Transport] = None
        self._connected = False

    @classmethod
    async def create(cls,
                     server: Tuple[str, int],
                     timeout: float = ClientConst.CONNECT_TIMEOUT,
                     broadcast_command: Optional[int] = None,
                     on_broadcast: Optional[Callable[[Packet], None]] = None,
                     strict_framing: bool = False,
                     logger: Optional[logging.Logger] = None) -> Self:
        self = cls(server, broadcast_command, on_broadcast, strict_framing, logger)
        await self.connect(timeout)
        return self

    async def connect(self, timeout: float = ClientConst.CONNECT_TIMEOUT):
        """Open the TCP connection. Connect success, connect error and timeout race each other."""
        if self._connected:
            return
        host, port = self.server
        loop = asyncio.get_running_loop()
        try:
            transport, _ = await asyncio.wait_for(
                loop.create_connection(
                    lambda: OpenRGBStreamProtocol(self._data_received, self._connection_lost, self.logger),
                    host, port),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise OpenRGBTimeoutError(f"Connection to {host}:{port} timed out after {timeout}s")
        except OSError as e:
            raise OpenRGBConnectionError(f"Could not connect to {host}:{port}: {e}") from e
        self._transport = transport
        self._connected = True
        self.framer.reset()
        self.logger.info(f"Connected to OpenRGB server at {host}:{port}")

    def is_connected(self) -> bool:
        """Check if client is connected"""
        return self._connected and self._transport is not None and not self._transport.is_closing()

    def send_packet(self, device_id: int, command_id: int, payload: bytes = b"") -> bytes:
        """Write one packet to the socket. Returns the bytes written."""
        if not self.is_connected():
            raise OpenRGBDisconnectedError("Can't write to socket if not connected to OpenRGB")
        wire = encode_packet(device_id, command_id, payload)
        self._transport.write(wire)
        if self.on_send:
            self.on_send(Packet(device_id=device_id, command_id=command_id, payload=payload))
        return wire

    def expect(self, device_id: int, command_id: int) -> PendingRequest:
        """Register interest in the next reply for (device_id, command_id)"""
        if not self.is_connected():
            raise OpenRGBDisconnectedError("Can't read from socket if not connected to OpenRGB")
        return self.correlator.register(device_id, command_id)

    async def wait(self, pending: PendingRequest, timeout: Optional[float] = None) -> bytes:
        """Wait for the reply to a registered request. With no timeout, waits until the reply or a disconnect."""
        try:
            return await asyncio.wait_for(pending.future, timeout=timeout)
        except asyncio.TimeoutError:
            self.correlator.cancel(pending)
            raise OpenRGBTimeoutError(
                f"No reply from {self.server[0]}:{self.server[1]} for device {pending.device_id} command {pending.command_id} after {timeout}s")

    async def request(self, device_id: int, command_id: int, payload: bytes = b"", timeout: Optional[float] = None) -> bytes:
        """Send a request and return the payload of its reply"""
        pending = self.expect(device_id, command_id)
        try:
            self.send_packet(device_id, command_id, payload)
        except Exception:
            self.correlator.cancel(pending)
            raise
        return await self.wait(pending, timeout=timeout)

    def _data_received(self, data: bytes):
        try:
            packets = self.framer.feed(data)
        except OpenRGBMalformedHeaderError as e:
            self.logger.error(f"Closing connection to {self.server[0]}:{self.server[1]}: {e}")
            self._fail(e)
            return
        for packet in packets:
            if self.on_receive:
                self.on_receive(packet)
            self.correlator.on_packet(packet)

    def _fail(self, exc: Exception):
        # connection_lost follows once the transport has closed
        self.correlator.reject_all(OpenRGBConnectionError(str(exc)))
        if self._transport:
            self._transport.close()

    def _connection_lost(self, exc: Optional[Exception]):
        was_connected = self._connected
        self._connected = False
        self._transport = None
        self.correlator.reject_all(OpenRGBConnectionError(
            f"Connection to {self.server[0]}:{self.server[1]} lost" + (f": {exc}" if exc else "")))
        if was_connected and self.on_disconnect:
            self.on_disconnect(exc)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client"""
        self._connected = False
        self.correlator.reject_all(OpenRGBDisconnectedError("Client closed"))
        if self._transport:
            self._transport.close()
            self._transport = None
