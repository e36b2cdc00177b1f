"""
OpenRGB wire-level packet framing.

This module turns the raw TCP byte stream into discrete packets. TCP delivers
bytes in arbitrary chunks, so a single read may carry half a header, several
whole packets, or the tail of one packet and the head of the next.

Packet layout (all integers little-endian):

    +--------+-----------+------------+---------+------------------+
    | Magic  | Device ID | Command ID | Length  |     Payload      |
    | 4 B    | u32       | u32        | u32     |  Length bytes    |
    +--------+-----------+------------+---------+------------------+

Example usage:
    framer = PacketFramer()
    for packet in framer.feed(chunk):
        print(packet.device_id, packet.command_id, packet.payload.hex())
"""

import logging
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..exceptions import OpenRGBMalformedHeaderError


class FrameConst:
    """Constants for packet framing"""
    MAGIC = b"ORGB"
    HEADER_SIZE = 16
    HEADER_FORMAT = "<4sIII"
    MAX_PAYLOAD = 64 * 1024 * 1024


@dataclass(frozen=True)
class Packet:
    """A complete packet with its header already stripped"""
    device_id: int
    command_id: int
    payload: bytes = field(default=b"", repr=False)

    @property
    def length(self) -> int:
        return len(self.payload)

    def __repr__(self) -> str:
        return (f"Packet(device_id={self.device_id}, command_id={self.command_id}, "
                f"length={self.length}, payload={self.payload.hex(' ') if self.payload else '(empty)'})")


def encode_header(device_id: int, command_id: int, length: int) -> bytes:
    """Build the 16 byte header for a packet."""
    return struct.pack(FrameConst.HEADER_FORMAT, FrameConst.MAGIC, device_id, command_id, length)


def encode_packet(device_id: int, command_id: int, payload: bytes = b"") -> bytes:
    """Build a complete packet (header + payload) ready to be written to the socket."""
    return encode_header(device_id, command_id, len(payload)) + payload


class FramerState(Enum):
    AWAITING_HEADER = 0
    AWAITING_PAYLOAD = 1


class PacketFramer:
    """
    Two-state machine that reassembles packets from a byte stream.

    AWAITING_HEADER:  wait for 16 bytes, check the magic, read the header.
                      A zero length packet is emitted straight away.
    AWAITING_PAYLOAD: wait for `length` bytes, then emit the packet.

    Partial data is never consumed: it stays in the buffer until the rest
    arrives. On a bad magic the framer either scans forward to the next
    b"ORGB" (default) or raises OpenRGBMalformedHeaderError (strict=True).
    """

    def __init__(self,
                 strict: bool = False,
                 max_payload: int = FrameConst.MAX_PAYLOAD,
                 logger: Optional[logging.Logger] = None):
        self.strict = strict
        self.max_payload = max_payload
        self.logger = logger or logging.getLogger(__name__)
        self.state = FramerState.AWAITING_HEADER
        self.discarded_bytes = 0
        self._buffer = bytearray()
        self._device_id = 0
        self._command_id = 0
        self._length = 0

    @property
    def buffered(self) -> int:
        """Number of bytes received but not yet emitted as part of a packet"""
        return len(self._buffer)

    def reset(self):
        """Drop any partial packet and start again from a header"""
        self._buffer.clear()
        self.state = FramerState.AWAITING_HEADER
        self._length = 0

    def feed(self, data: bytes) -> list[Packet]:
        """Add received bytes and return every packet that is now complete, in stream order."""
        if data:
            self._buffer.extend(data)
        packets: list[Packet] = []
        while True:
            packet = self._step()
            if packet is None:
                break
            packets.append(packet)
        return packets

    def _step(self) -> Optional[Packet]:
        # Loop only to retry the header after a resync
        while True:
            match self.state:
                case FramerState.AWAITING_HEADER:
                    if len(self._buffer) < FrameConst.HEADER_SIZE:
                        return None
                    magic, device_id, command_id, length = struct.unpack_from(FrameConst.HEADER_FORMAT, self._buffer)
                    if magic != FrameConst.MAGIC:
                        self._malformed(f"bad magic {bytes(magic)!r}")
                        continue
                    if length > self.max_payload:
                        self._malformed(f"payload length {length} exceeds limit of {self.max_payload}")
                        continue
                    del self._buffer[:FrameConst.HEADER_SIZE]
                    if length == 0:
                        return Packet(device_id=device_id, command_id=command_id)
                    self._device_id = device_id
                    self._command_id = command_id
                    self._length = length
                    self.state = FramerState.AWAITING_PAYLOAD

                case FramerState.AWAITING_PAYLOAD:
                    if len(self._buffer) < self._length:
                        return None
                    payload = bytes(self._buffer[:self._length])
                    del self._buffer[:self._length]
                    self.state = FramerState.AWAITING_HEADER
                    return Packet(device_id=self._device_id, command_id=self._command_id, payload=payload)

    def _malformed(self, reason: str):
        if self.strict:
            raise OpenRGBMalformedHeaderError(f"Malformed packet header: {reason}")
        # The magic may start anywhere after the first byte of the bad header
        index = self._buffer.find(FrameConst.MAGIC, 1)
        if index < 0:
            # Keep a possible partial magic at the end of the buffer
            index = max(1, len(self._buffer) - (len(FrameConst.MAGIC) - 1))
        del self._buffer[:index]
        self.discarded_bytes += index
        self.logger.warning(f"Malformed packet header ({reason}), discarded {index} bytes to resynchronise")
