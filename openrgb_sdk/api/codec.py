"""
Binary codec for OpenRGB payloads.

Pure functions, no I/O. Every function that depends on the layout takes the
negotiated protocol version explicitly:

- protocol >= 1: devices carry a vendor string
- protocol >= 3: modes carry brightness min/max/current
- protocol >= 4: zones carry a segment list

All integers are little-endian. Strings are a u16 length (text plus a trailing
NUL) followed by the text and the NUL.
"""

import struct
from dataclasses import replace
from typing import Optional

from .models import RGBColor, Led, Segment, Matrix, Zone, Mode, Device
from .types import ModeFlag, MODE_FLAG_TAGS, Const
from ..exceptions import OpenRGBResponseError


class PayloadReader:
    """Sequential cursor over a reply payload"""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def _unpack(self, fmt: str):
        size = struct.calcsize(fmt)
        if self.remaining < size:
            raise OpenRGBResponseError(f"Payload truncated: need {size} bytes at offset {self.offset}, have {self.remaining}")
        values = struct.unpack_from(fmt, self.data, self.offset)
        self.offset += size
        return values

    def u16(self) -> int:
        return self._unpack("<H")[0]

    def u32(self) -> int:
        return self._unpack("<I")[0]

    def i32(self) -> int:
        return self._unpack("<i")[0]

    def u32s(self, count: int) -> tuple[int, ...]:
        return self._unpack(f"<{count}I")

    def skip(self, count: int):
        if self.remaining < count:
            raise OpenRGBResponseError(f"Payload truncated: cannot skip {count} bytes at offset {self.offset}")
        self.offset += count

    def string(self) -> str:
        length = self.u16()
        if self.remaining < length:
            raise OpenRGBResponseError(f"Payload truncated: string of {length} bytes at offset {self.offset}")
        # length counts the trailing NUL
        raw = self.data[self.offset:self.offset + max(length - 1, 0)]
        self.offset += length
        return raw.decode("utf-8", errors="replace")

    def color(self) -> RGBColor:
        red, green, blue, _ = self._unpack("<BBBB")
        return RGBColor(red, green, blue)

    def colors(self, count: int) -> list[RGBColor]:
        return [self.color() for _ in range(count)]


# ============================
# DECODING
# ============================

def decode_string(data: bytes, offset: int = 0) -> tuple[str, int]:
    """Decode a length-prefixed string. Returns the text and the number of bytes consumed."""
    reader = PayloadReader(data, offset)
    text = reader.string()
    return text, reader.offset - offset


def decode_color(data: bytes, offset: int = 0) -> RGBColor:
    return PayloadReader(data, offset).color()


def decode_u32(data: bytes) -> int:
    return PayloadReader(data).u32()


def flag_tags(flags: int) -> list[str]:
    """Capability tags for a mode flag bitfield, in bit order, plus 'direction' if any direction bit is set."""
    tags = [tag for flag, tag in MODE_FLAG_TAGS if flags & flag]
    if flags & ModeFlag.HAS_DIRECTION:
        tags.append("direction")
    return tags


def apply_mode_flags(mode: Mode, version: int) -> Mode:
    """Force fields to zero where the flag bitfield says the capability is absent.

    This is independent of which fields were present on the wire: brightness is
    only touched at protocol 3 and above, where the fields exist.
    """
    flags = mode.flags
    changes: dict = {"flag_list": flag_tags(flags)}
    if not flags & ModeFlag.HAS_SPEED:
        changes.update(speed_min=0, speed_max=0, speed=0)
    if version >= Const.BRIGHTNESS_MIN_VERSION and not flags & ModeFlag.HAS_BRIGHTNESS:
        changes.update(brightness_min=0, brightness_max=0, brightness=0)
    if not flags & ModeFlag.HAS_DIRECTION:
        changes.update(direction=0)
    if not flags & ModeFlag.HAS_COLOR or not mode.colors:
        changes.update(colors=[], color_min=0, color_max=0)
    return replace(mode, **changes)


def decode_mode(reader: PayloadReader, index: int, version: int) -> Mode:
    name = reader.string()
    value = reader.i32()
    flags, speed_min, speed_max = reader.u32s(3)
    brightness_min = brightness_max = brightness = None
    if version >= Const.BRIGHTNESS_MIN_VERSION:
        brightness_min, brightness_max = reader.u32s(2)
    color_min, color_max, speed = reader.u32s(3)
    if version >= Const.BRIGHTNESS_MIN_VERSION:
        brightness = reader.u32()
    direction, color_mode = reader.u32s(2)
    color_length = reader.u16()
    # Colors are always consumed so the cursor stays aligned, whatever the flags say
    colors = reader.colors(color_length)

    mode = Mode(
        id=index,
        name=name,
        value=value,
        flags=flags,
        speed_min=speed_min,
        speed_max=speed_max,
        brightness_min=brightness_min,
        brightness_max=brightness_max,
        color_min=color_min,
        color_max=color_max,
        speed=speed,
        brightness=brightness,
        direction=direction,
        color_mode=color_mode,
        colors=colors,
    )
    return apply_mode_flags(mode, version)


def decode_matrix(reader: PayloadReader, matrix_size: int) -> Matrix:
    height, width = reader.u32s(2)
    keys: list[list[Optional[int]]] = []
    for _ in range(height):
        row = reader.u32s(width) if width else ()
        keys.append([None if led == Const.MATRIX_NO_LED else led for led in row])
    return Matrix(size=matrix_size // 4 - 2, height=height, width=width, keys=keys)


def decode_zone(reader: PayloadReader, index: int, version: int) -> Zone:
    name = reader.string()
    zone_type = reader.i32()
    leds_min, leds_max, leds_count = reader.u32s(3)
    matrix_size = reader.u16()
    matrix = decode_matrix(reader, matrix_size) if matrix_size else None
    segments = None
    if version >= Const.SEGMENTS_MIN_VERSION:
        segments = []
        for _ in range(reader.u16()):
            segment_name = reader.string()
            segment_type = reader.i32()
            start, length = reader.u32s(2)
            segments.append(Segment(name=segment_name, type=segment_type, start=start, length=length))
    return Zone(
        name=name,
        id=index,
        type=zone_type,
        leds_min=leds_min,
        leds_max=leds_max,
        leds_count=leds_count,
        matrix=matrix,
        segments=segments,
    )


def decode_device(data: bytes, device_id: int, version: int) -> Device:
    """Decode a REQUEST_CONTROLLER_DATA reply"""
    reader = PayloadReader(data)
    reader.u32()  # data size
    device_type = reader.i32()
    name = reader.string()
    vendor = reader.string() if version >= Const.VENDOR_MIN_VERSION else None
    description = reader.string()
    firmware_version = reader.string()
    serial = reader.string()
    location = reader.string()

    mode_count = reader.u16()
    active_mode = reader.i32()
    modes = [decode_mode(reader, i, version) for i in range(mode_count)]

    zones = [decode_zone(reader, i, version) for i in range(reader.u16())]

    leds = []
    for _ in range(reader.u16()):
        led_name = reader.string()
        leds.append(Led(name=led_name, value=reader.u32()))

    colors = reader.colors(reader.u16())

    return Device(
        device_id=device_id,
        type=device_type,
        name=name,
        vendor=vendor,
        description=description,
        version=firmware_version,
        serial=serial,
        location=location,
        active_mode=active_mode,
        modes=modes,
        zones=zones,
        leds=leds,
        colors=colors,
    )


def decode_mode_update(data: bytes, version: int) -> Mode:
    """Decode an UPDATE_MODE / SAVE_MODE payload, as produced by encode_mode()"""
    reader = PayloadReader(data)
    reader.u32()  # data size
    mode_id = reader.u32()
    return decode_mode(reader, mode_id, version)


def decode_profile_list(data: bytes) -> list[str]:
    """Decode a REQUEST_PROFILE_LIST reply"""
    reader = PayloadReader(data)
    reader.u32()  # data size
    return [reader.string() for _ in range(reader.u16())]


# ============================
# ENCODING
# ============================

def encode_u32(value: int) -> bytes:
    return struct.pack("<I", value)


def encode_string(text: str) -> bytes:
    """u16 length (including the NUL), then the UTF-8 text and a NUL"""
    raw = text.encode("utf-8")
    return struct.pack("<H", len(raw) + 1) + raw + b"\x00"


def encode_name(text: str) -> bytes:
    """Bare NUL-terminated text, as used by SET_CLIENT_NAME and the profile commands"""
    return text.encode("utf-8") + b"\x00"


def encode_color(color: RGBColor) -> bytes:
    return struct.pack("<BBBx", color.red, color.green, color.blue)


def encode_color_list(colors: list[RGBColor]) -> bytes:
    return struct.pack("<H", len(colors)) + b"".join(encode_color(c) for c in colors)


def encode_mode(mode: Mode, version: int) -> bytes:
    """Payload for UPDATE_MODE / SAVE_MODE, prefixed by its own length"""
    if version >= Const.BRIGHTNESS_MIN_VERSION:
        fields = struct.pack("<12I",
                             mode.value & 0xFFFFFFFF,
                             mode.flags,
                             mode.speed_min,
                             mode.speed_max,
                             mode.brightness_min or 0,
                             mode.brightness_max or 0,
                             mode.color_min,
                             mode.color_max,
                             mode.speed,
                             mode.brightness or 0,
                             mode.direction,
                             mode.color_mode)
    else:
        fields = struct.pack("<9I",
                             mode.value & 0xFFFFFFFF,
                             mode.flags,
                             mode.speed_min,
                             mode.speed_max,
                             mode.color_min,
                             mode.color_max,
                             mode.speed,
                             mode.direction,
                             mode.color_mode)
    data = encode_u32(mode.id) + encode_string(mode.name) + fields + encode_color_list(mode.colors)
    return encode_u32(len(data)) + data


def encode_update_leds(colors: list[RGBColor]) -> bytes:
    data = encode_color_list(colors)
    return encode_u32(len(data)) + data


def encode_update_zone_leds(zone_id: int, colors: list[RGBColor]) -> bytes:
    data = encode_u32(zone_id) + encode_color_list(colors)
    return encode_u32(len(data)) + data


def encode_update_single_led(led_id: int, color: RGBColor) -> bytes:
    return encode_u32(led_id) + encode_color(color)


def encode_resize_zone(zone_id: int, size: int) -> bytes:
    return struct.pack("<ii", zone_id, size)
