"""
OpenRGB SDK Python Library

A Python library for controlling RGB lighting through an OpenRGB server.

This library provides two layers of abstraction:

1. **io**: Wire-level protocol implementation (TCP, packet framing, reply matching)
2. **api**: OpenRGB SDK commands using io (devices, modes, zones, profiles)

Example usage:
    import openrgb_sdk

    async with openrgb_sdk.OpenRGBProtocol(host="127.0.0.1", name="my-script") as orgb:
        for device in await orgb.get_all_controller_data():
            print(device.name, [mode.name for mode in device.modes])
            await orgb.update_mode(device.device_id, "Static")
"""

# Commands (recommended for most users)
from .api.protocol import OpenRGBProtocol

# API-level models
from .api.models import RGBColor, Led, Segment, Matrix, Zone, Mode, Device, ModePatch, select_mode

# Low-level models (used by io)
from .io import OpenRGBClient, PacketFramer, RequestCorrelator, Packet

# Shared types, configuration and exceptions
from .api.types import Command, DeviceType, ZoneType, ModeFlag, ModeDirection, ModeColorMode
from .config import OpenRGBConfig, load_config
from .exceptions import (OpenRGBError, OpenRGBTimeoutError, OpenRGBResponseError, OpenRGBMalformedHeaderError,
                         OpenRGBConnectionError, OpenRGBDisconnectedError, OpenRGBNegotiationError,
                         OpenRGBConfigurationError)

# Utilities
from .utils import run_with_keyboard_interrupt

__version__ = "0.1.0"

# Public API - these are the main classes users should import
__all__ = [
    # Commands
    "OpenRGBProtocol",

    # API-level models
    "RGBColor",
    "Led",
    "Segment",
    "Matrix",
    "Zone",
    "Mode",
    "Device",
    "ModePatch",
    "select_mode",

    # Low-level models (for advanced users)
    "OpenRGBClient",
    "PacketFramer",
    "RequestCorrelator",
    "Packet",

    # Configuration
    "OpenRGBConfig",
    "load_config",

    # Exceptions
    "OpenRGBError",
    "OpenRGBTimeoutError",
    "OpenRGBResponseError",
    "OpenRGBMalformedHeaderError",
    "OpenRGBConnectionError",
    "OpenRGBDisconnectedError",
    "OpenRGBNegotiationError",
    "OpenRGBConfigurationError",

    # Types and enums
    "Command",
    "DeviceType",
    "ZoneType",
    "ModeFlag",
    "ModeDirection",
    "ModeColorMode",

    # Utilities
    "run_with_keyboard_interrupt",
]
