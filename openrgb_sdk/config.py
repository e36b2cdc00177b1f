"""
Configuration loading.

Connection settings are read from a YAML file shaped like:

    openrgb:
      host: 127.0.0.1
      port: 6742
      name: living-room
      timeout: 1.0
      force_protocol_version: 3

`openrgb` may also be a list of such mappings, in which case the first is used.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Self, Any

import yaml

from .exceptions import OpenRGBConfigurationError


@dataclass
class OpenRGBConfig:
    host: str = "127.0.0.1"
    port: int = 6742
    name: str = "python"
    timeout: float = 1.0
    request_timeout: Optional[float] = None
    force_protocol_version: Optional[int] = None
    strict_framing: bool = False
    print_traffic: bool = False

    def __post_init__(self):
        if not isinstance(self.host, str) or not self.host:
            raise OpenRGBConfigurationError(f"host must be a non-empty string, got {self.host!r}")
        if not isinstance(self.port, int) or not 0 < self.port <= 65535:
            raise OpenRGBConfigurationError(f"port must be 1-65535, got {self.port!r}")
        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise OpenRGBConfigurationError(f"timeout must be a positive number, got {self.timeout!r}")
        if self.request_timeout is not None and (not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0):
            raise OpenRGBConfigurationError(f"request_timeout must be a positive number, got {self.request_timeout!r}")
        if self.force_protocol_version is not None and (not isinstance(self.force_protocol_version, int) or self.force_protocol_version < 0):
            raise OpenRGBConfigurationError(f"force_protocol_version must be a non-negative integer, got {self.force_protocol_version!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise OpenRGBConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)


def load_config(path: str | Path) -> OpenRGBConfig:
    """Load connection settings from a YAML file"""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except OSError as e:
        raise OpenRGBConfigurationError(f"Could not read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise OpenRGBConfigurationError(f"Could not parse {path}: {e}") from e

    section = document.get("openrgb") if isinstance(document, dict) else None
    if isinstance(section, list):
        section = section[0] if section else None
    if section is None:
        return OpenRGBConfig()
    if not isinstance(section, dict):
        raise OpenRGBConfigurationError(f"'openrgb' in {path} must be a mapping or a list of mappings")
    return OpenRGBConfig.from_dict(section)
