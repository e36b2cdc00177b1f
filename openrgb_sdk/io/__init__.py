"""
Wire-level protocol implementation.

This module contains the lowest-level communication components:
- OpenRGBClient - Raw TCP communication, connect, send, await replies
- PacketFramer - Reassembly of packets from the byte stream
- RequestCorrelator - Matching of replies to pending requests
"""

from .framing import Packet, PacketFramer, FramerState, FrameConst, encode_header, encode_packet
from .correlator import RequestCorrelator, PendingRequest
from .client import OpenRGBClient, ClientConst

__all__ = [
    "OpenRGBClient",
    "PacketFramer",
    "FramerState",
    "Packet",
    "RequestCorrelator",
    "PendingRequest",
    "encode_header",
    "encode_packet",
    "FrameConst",
    "ClientConst",
]
