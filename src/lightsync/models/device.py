"""Device query results exchanged with a device handle.

Values are already scaled: hue 0-360, saturation/brightness 0-100, kelvin.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class DeviceState:
    """Result of a state query."""

    power: bool
    hue: float
    saturation: float
    brightness: float
    kelvin: float
    label: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeviceState":
        """Build from ``{power, color: {hue, saturation, brightness, kelvin}, label}``."""
        color = data.get("color") or {}
        return cls(
            power=bool(data.get("power")),
            hue=color.get("hue", 0),
            saturation=color.get("saturation", 0),
            brightness=color.get("brightness", 0),
            kelvin=color.get("kelvin", 3500),
            label=data.get("label"),
        )


@dataclass
class HardwareInfo:
    """Result of a hardware version query."""

    product_name: str | None = None
    color: bool = False
    infrared: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HardwareInfo":
        """Build from ``{productName, productFeatures: {color, infrared}}``."""
        features = data.get("productFeatures") or {}
        return cls(
            product_name=data.get("productName"),
            color=bool(features.get("color")),
            infrared=bool(features.get("infrared")),
        )
