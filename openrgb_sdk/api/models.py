"""
OpenRGB API-level models.

This module contains models that belong to the api layer:
- RGBColor, Led, Segment, Matrix, Zone, Mode, Device (decoded from server replies)
- ModePatch and select_mode() to pick and adjust a mode before updating it

Decoded models are snapshots of one reply. They hold no reference to the
connection; change a copy (dataclasses.replace) and send it back.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Self

from .types import DeviceType, ZoneType, ModeFlag


@dataclass(frozen=True)
class RGBColor:
    """Represents a colour as sent on the wire (R, G, B, one padding byte)"""
    red: int
    green: int
    blue: int

    def __post_init__(self):
        for channel in ("red", "green", "blue"):
            value = getattr(self, channel)
            if not 0 <= value <= 255:
                raise ValueError(f"{channel.capitalize()} must be between 0 and 255, received {value}")

    @classmethod
    def from_hex(cls, value: str) -> Self:
        value = value.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Hex colour must have 6 digits, received {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))

    def to_hex(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"


@dataclass(frozen=True)
class Led:
    name: str
    value: int


@dataclass(frozen=True)
class Segment:
    name: str
    type: int
    start: int
    length: int


@dataclass(frozen=True)
class Matrix:
    """LED layout of a matrix zone. keys[row][column] is an LED index, or None where there is no LED."""
    size: int
    height: int
    width: int
    keys: list[list[Optional[int]]] = field(default_factory=list)


@dataclass(frozen=True)
class Zone:
    name: str
    id: int
    type: int
    leds_min: int
    leds_max: int
    leds_count: int
    matrix: Optional[Matrix] = None
    segments: Optional[list[Segment]] = None  # None below protocol 4

    @property
    def resizable(self) -> bool:
        return self.leds_min != self.leds_max

    @property
    def zone_type(self) -> Optional[ZoneType]:
        return ZoneType(self.type) if self.type in ZoneType._value2member_map_ else None


@dataclass(frozen=True)
class Mode:
    """Represents a lighting mode. Brightness fields are None below protocol 3."""
    id: int
    name: str
    value: int
    flags: int
    speed_min: int
    speed_max: int
    color_min: int
    color_max: int
    speed: int
    direction: int
    color_mode: int
    brightness_min: Optional[int] = None
    brightness_max: Optional[int] = None
    brightness: Optional[int] = None
    colors: list[RGBColor] = field(default_factory=list)
    flag_list: list[str] = field(default_factory=list)

    @property
    def capabilities(self) -> ModeFlag:
        return ModeFlag(self.flags & 0x3FF)

    def has(self, flag: ModeFlag) -> bool:
        return bool(self.flags & flag)


@dataclass(frozen=True)
class Device:
    """Represents one RGB controller as reported by the server"""
    device_id: int
    type: int
    name: str
    description: str
    version: str
    serial: str
    location: str
    active_mode: int
    vendor: Optional[str] = None  # None below protocol 1
    modes: list[Mode] = field(default_factory=list)
    zones: list[Zone] = field(default_factory=list)
    leds: list[Led] = field(default_factory=list)
    colors: list[RGBColor] = field(default_factory=list)

    @property
    def device_type(self) -> Optional[DeviceType]:
        return DeviceType(self.type) if self.type in DeviceType._value2member_map_ else None

    def get_mode(self) -> Optional[Mode]:
        """The currently active mode, if the index is valid"""
        if 0 <= self.active_mode < len(self.modes):
            return self.modes[self.active_mode]
        return None


@dataclass
class ModePatch:
    """
    Selects a mode by id or name and overrides some of its settings.

    Fields left as None keep the mode's current value.
    """
    id: Optional[int] = None
    name: Optional[str] = None
    speed: Optional[int] = None
    brightness: Optional[int] = None
    direction: Optional[int] = None
    color_mode: Optional[int] = None
    colors: Optional[list[RGBColor]] = None


ModeSelector = int | str | ModePatch


def select_mode(modes: list[Mode], selector: ModeSelector) -> Mode:
    """Resolve a selector (index, case-insensitive name, or ModePatch) against decoded modes. Returns a patched copy."""
    patch: Optional[ModePatch] = None
    match selector:
        case bool():
            raise TypeError(f"Mode must be an int, str or ModePatch, not {type(selector).__name__}")
        case int():
            mode_id, mode_name = selector, None
        case str():
            mode_id, mode_name = None, selector
        case ModePatch(id=int() as mode_id):
            patch, mode_name = selector, None
        case ModePatch(name=str() as mode_name):
            patch, mode_id = selector, None
        case ModePatch():
            raise ValueError("Either mode.id or mode.name has to be given, but both are missing")
        case _:
            raise TypeError(f"Mode must be an int, str or ModePatch, not {type(selector).__name__}")

    if mode_id is not None:
        if not 0 <= mode_id < len(modes):
            raise ValueError(f"{mode_id} is not the id of a mode")
        mode = modes[mode_id]
    else:
        found = [m for m in modes if m.name.lower() == mode_name.lower()]
        if not found:
            raise ValueError(f"{mode_name!r} is not the name of a mode")
        mode = found[0]

    if patch is None:
        return mode

    changes = {}
    for name in ("speed", "brightness", "direction", "color_mode", "colors"):
        value = getattr(patch, name)
        if value is not None:
            changes[name] = list(value) if name == "colors" else value
    return replace(mode, **changes)
