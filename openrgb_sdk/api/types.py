"""
API-level type definitions.

This module contains types and enums that belong to the API layer:
- Command identifiers of the OpenRGB SDK protocol
- Device and zone types, mode capability flags
- Constants used by the API layer
"""

from enum import Enum, IntEnum, IntFlag


class Command(IntEnum):
    REQUEST_CONTROLLER_COUNT = 0
    REQUEST_CONTROLLER_DATA = 1
    REQUEST_PROTOCOL_VERSION = 40
    SET_CLIENT_NAME = 50
    DEVICE_LIST_UPDATED = 100  # Broadcast only, no request counterpart
    REQUEST_PROFILE_LIST = 150
    REQUEST_SAVE_PROFILE = 151
    REQUEST_LOAD_PROFILE = 152
    REQUEST_DELETE_PROFILE = 153
    RESIZE_ZONE = 1000
    UPDATE_LEDS = 1050
    UPDATE_ZONE_LEDS = 1051
    UPDATE_SINGLE_LED = 1052
    SET_CUSTOM_MODE = 1100
    UPDATE_MODE = 1101
    SAVE_MODE = 1102


class DeviceType(Enum):
    MOTHERBOARD = 0
    DRAM = 1
    GPU = 2
    COOLER = 3
    LEDSTRIP = 4
    KEYBOARD = 5
    MOUSE = 6
    MOUSEMAT = 7
    HEADSET = 8
    HEADSET_STAND = 9
    GAMEPAD = 10
    LIGHT = 11
    SPEAKER = 12
    VIRTUAL = 13
    STORAGE = 14
    CASE = 15
    MICROPHONE = 16
    ACCESSORY = 17
    KEYPAD = 18
    UNKNOWN = 19


class ZoneType(Enum):
    SINGLE = 0
    LINEAR = 1
    MATRIX = 2


class ModeDirection(Enum):
    LEFT = 0
    RIGHT = 1
    UP = 2
    DOWN = 3
    HORIZONTAL = 4
    VERTICAL = 5


class ModeColorMode(Enum):
    NONE = 0
    PER_LED = 1
    MODE_SPECIFIC = 2
    RANDOM = 3


class ModeFlag(IntFlag):
    """Capability bits of a mode's flag bitfield, bit 0 first"""
    HAS_SPEED = 1 << 0
    HAS_DIRECTION_LR = 1 << 1
    HAS_DIRECTION_UD = 1 << 2
    HAS_DIRECTION_HV = 1 << 3
    HAS_BRIGHTNESS = 1 << 4
    HAS_PER_LED_COLOR = 1 << 5
    HAS_MODE_SPECIFIC_COLOR = 1 << 6
    HAS_RANDOM_COLOR = 1 << 7
    MANUAL_SAVE = 1 << 8
    AUTOMATIC_SAVE = 1 << 9

    # Composites used by the decode rules
    HAS_DIRECTION = HAS_DIRECTION_LR | HAS_DIRECTION_UD | HAS_DIRECTION_HV
    HAS_COLOR = HAS_PER_LED_COLOR | HAS_MODE_SPECIFIC_COLOR | HAS_RANDOM_COLOR


# Capability tags, in bit order
MODE_FLAG_TAGS: list[tuple[ModeFlag, str]] = [
    (ModeFlag.HAS_SPEED, "speed"),
    (ModeFlag.HAS_DIRECTION_LR, "directionLR"),
    (ModeFlag.HAS_DIRECTION_UD, "directionUD"),
    (ModeFlag.HAS_DIRECTION_HV, "directionHV"),
    (ModeFlag.HAS_BRIGHTNESS, "brightness"),
    (ModeFlag.HAS_PER_LED_COLOR, "perLedColor"),
    (ModeFlag.HAS_MODE_SPECIFIC_COLOR, "modeSpecificColor"),
    (ModeFlag.HAS_RANDOM_COLOR, "randomColor"),
    (ModeFlag.MANUAL_SAVE, "manualSave"),
    (ModeFlag.AUTOMATIC_SAVE, "automaticSave"),
]


# API-level constants
class Const:
    """API-level constants"""
    CLIENT_PROTOCOL_VERSION = 5  # Highest protocol version this library speaks
    DEFAULT_CLIENT_NAME = "python"
    NEGOTIATION_TIMEOUT = 1.0
    DEVICE_LIST_QUEUE_SIZE = 16  # Unread device list notifications kept for device_list_updates()

    # First protocol version carrying each optional field
    VENDOR_MIN_VERSION = 1
    BRIGHTNESS_MIN_VERSION = 3
    SEGMENTS_MIN_VERSION = 4

    MATRIX_NO_LED = 0xFFFFFFFF
