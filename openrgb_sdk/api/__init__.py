"""
API-level models, codec and protocol implementation.

This module contains everything that belongs to the API layer:
- Device, Mode, Zone, Matrix, Segment, Led, RGBColor (decoded models)
- codec (payload encoding and decoding for a given protocol version)
- negotiate_protocol_version (agreeing a version with the server)
- OpenRGBProtocol (implements the SDK commands)
"""

from .models import RGBColor, Led, Segment, Matrix, Zone, Mode, Device, ModePatch, ModeSelector, select_mode
from .negotiation import negotiate_protocol_version, resolve_protocol_version
from .protocol import OpenRGBProtocol
from .types import Command, DeviceType, ZoneType, ModeFlag, ModeDirection, ModeColorMode, Const

__all__ = [
    # API-level models
    "RGBColor",
    "Led",
    "Segment",
    "Matrix",
    "Zone",
    "Mode",
    "Device",
    "ModePatch",
    "ModeSelector",
    "select_mode",

    # Negotiation and commands
    "negotiate_protocol_version",
    "resolve_protocol_version",
    "OpenRGBProtocol",

    # API-level types
    "Command",
    "DeviceType",
    "ZoneType",
    "ModeFlag",
    "ModeDirection",
    "ModeColorMode",
    "Const",
]
