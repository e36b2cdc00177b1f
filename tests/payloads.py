"""
Hand-built OpenRGB payloads, written independently of openrgb_sdk.api.codec.
"""

import struct


def u16(value: int) -> bytes:
    return struct.pack("<H", value)


def u32(value: int) -> bytes:
    return struct.pack("<I", value)


def i32(value: int) -> bytes:
    return struct.pack("<i", value)


def string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return u16(len(raw) + 1) + raw + b"\x00"


def color(red: int, green: int, blue: int) -> bytes:
    return bytes([red, green, blue, 0])


def header(device_id: int, command_id: int, length: int) -> bytes:
    return b"ORGB" + u32(device_id) + u32(command_id) + u32(length)


def packet(device_id: int, command_id: int, payload: bytes = b"") -> bytes:
    return header(device_id, command_id, len(payload)) + payload


def mode(name: str, value: int = 0, flags: int = 0,
         speed_min: int = 0, speed_max: int = 0,
         brightness_min: int = 0, brightness_max: int = 0,
         color_min: int = 0, color_max: int = 0,
         speed: int = 0, brightness: int = 0,
         direction: int = 0, color_mode: int = 0,
         colors: tuple = (), version: int = 5) -> bytes:
    data = string(name) + i32(value) + u32(flags) + u32(speed_min) + u32(speed_max)
    if version >= 3:
        data += u32(brightness_min) + u32(brightness_max)
    data += u32(color_min) + u32(color_max) + u32(speed)
    if version >= 3:
        data += u32(brightness)
    data += u32(direction) + u32(color_mode)
    data += u16(len(colors)) + b"".join(color(*c) for c in colors)
    return data


def zone(name: str, zone_type: int = 1, leds_min: int = 0, leds_max: int = 0, leds_count: int = 0,
         matrix: list | None = None, segments: tuple = (), version: int = 5) -> bytes:
    data = string(name) + i32(zone_type) + u32(leds_min) + u32(leds_max) + u32(leds_count)
    if matrix:
        height, width = len(matrix), len(matrix[0])
        grid = b"".join(u32(0xFFFFFFFF if led is None else led) for row in matrix for led in row)
        data += u16((2 + height * width) * 4) + u32(height) + u32(width) + grid
    else:
        data += u16(0)
    if version >= 4:
        data += u16(len(segments))
        for segment_name, segment_type, start, length in segments:
            data += string(segment_name) + i32(segment_type) + u32(start) + u32(length)
    return data


def device(version: int = 5, device_type: int = 4, name: str = "Strip", vendor: str = "Acme",
           description: str = "An LED strip", firmware: str = "1.0", serial: str = "SN1",
           location: str = "COM1", active_mode: int = 0, modes: tuple = (), zones: tuple = (),
           leds: tuple = (), colors: tuple = ()) -> bytes:
    body = i32(device_type) + string(name)
    if version >= 1:
        body += string(vendor)
    body += string(description) + string(firmware) + string(serial) + string(location)
    body += u16(len(modes)) + i32(active_mode) + b"".join(modes)
    body += u16(len(zones)) + b"".join(zones)
    body += u16(len(leds)) + b"".join(string(led_name) + u32(value) for led_name, value in leds)
    body += u16(len(colors)) + b"".join(color(*c) for c in colors)
    return u32(len(body) + 4) + body


def profile_list(names: list[str]) -> bytes:
    body = u16(len(names)) + b"".join(string(n) for n in names)
    return u32(len(body) + 4) + body


# Flag bits
SPEED = 1 << 0
DIRECTION_LR = 1 << 1
DIRECTION_UD = 1 << 2
DIRECTION_HV = 1 << 3
BRIGHTNESS = 1 << 4
PER_LED_COLOR = 1 << 5
MODE_SPECIFIC_COLOR = 1 << 6
RANDOM_COLOR = 1 << 7
MANUAL_SAVE = 1 << 8
AUTOMATIC_SAVE = 1 << 9
ALL_FLAGS = 0x3FF


def sample_device(version: int = 5) -> bytes:
    """A strip with a Direct mode and a Static mode, one linear zone and one matrix zone"""
    return device(
        version=version,
        active_mode=1,
        modes=(
            mode("Direct", value=0, flags=PER_LED_COLOR, color_mode=1, version=version),
            mode("Static", value=1, flags=MODE_SPECIFIC_COLOR | BRIGHTNESS | MANUAL_SAVE,
                 brightness_min=0, brightness_max=100, brightness=80,
                 color_min=1, color_max=1, color_mode=2, colors=((255, 0, 0),), version=version),
            mode("Rainbow", value=4, flags=SPEED | DIRECTION_LR | BRIGHTNESS,
                 speed_min=1, speed_max=10, speed=5, brightness_max=100, brightness=100,
                 direction=1, version=version),
        ),
        zones=(
            zone("Strip", zone_type=1, leds_min=0, leds_max=60, leds_count=2,
                 segments=(("Left", 1, 0, 1),), version=version),
            zone("Pad", zone_type=2, leds_min=2, leds_max=2, leds_count=2,
                 matrix=[[0, None], [None, 1]], version=version),
        ),
        leds=(("LED 1", 0), ("LED 2", 1)),
        colors=((1, 2, 3), (4, 5, 6)),
    )
