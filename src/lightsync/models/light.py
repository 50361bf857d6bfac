"""Light state model."""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from lightsync.color import clamp
from lightsync.models.base import ColorMode
from lightsync.models.device import DeviceState

HUE_RANGE = (0, 360)
SATURATION_RANGE = (0, 100)
BRIGHTNESS_RANGE = (0, 100)
KELVIN_RANGE = (2000, 10000)
MIRED_RANGE = (100, 500)
INFRARED_RANGE = (0, 100)

DEFAULT_KELVIN = 3500


@dataclass
class LightDelta:
    """Fields changed by a single command. None means unchanged."""

    on: bool | None = None
    hue: int | None = None
    saturation: int | None = None
    brightness: int | None = None
    kelvin: int | None = None
    mode: ColorMode | None = None
    max_ir: int | None = None

    @property
    def has_light_changes(self) -> bool:
        """True if anything other than the infrared level changed."""
        return any(
            getattr(self, f.name) is not None for f in fields(self) if f.name != "max_ir"
        )

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = value.value if isinstance(value, ColorMode) else value
        return result


@dataclass
class LightState:
    """Authoritative power and color state of a light.

    Every numeric field is clamped on construction and on merge. Turning the
    light off never resets color fields.
    """

    on: bool = False
    hue: float = 0
    saturation: float = 0
    brightness: float = 0
    kelvin: float = DEFAULT_KELVIN
    mode: ColorMode = ColorMode.COLOR

    def __post_init__(self) -> None:
        # 360 is the same angle as 0
        self.hue = clamp(self.hue, *HUE_RANGE) % 360
        self.saturation = clamp(self.saturation, *SATURATION_RANGE)
        self.brightness = clamp(self.brightness, *BRIGHTNESS_RANGE)
        self.kelvin = clamp(self.kelvin, *KELVIN_RANGE)

    @classmethod
    def from_device(cls, state: DeviceState, mode: ColorMode = ColorMode.COLOR) -> "LightState":
        """Build from a device state reading."""
        return cls(
            on=state.power,
            hue=state.hue,
            saturation=state.saturation,
            brightness=state.brightness,
            kelvin=state.kelvin,
            mode=mode,
        )

    def merge(self, delta: LightDelta) -> "LightState":
        """Return a new state with delta fields applied."""
        changes = {
            name: value
            for name, value in asdict(delta).items()
            if value is not None and name != "max_ir"
        }
        return replace(self, **changes)

    def same_reading(self, other: "LightState") -> bool:
        """Compare the fields a device reports."""
        return (
            self.on == other.on
            and self.hue == other.hue
            and self.saturation == other.saturation
            and self.brightness == other.brightness
            and self.kelvin == other.kelvin
        )

    def to_state_dict(self) -> dict[str, Any]:
        """Return current state as dict."""
        return {
            "on": self.on,
            "hue": self.hue,
            "saturation": self.saturation,
            "brightness": self.brightness,
            "kelvin": self.kelvin,
            "mode": self.mode.value,
        }
