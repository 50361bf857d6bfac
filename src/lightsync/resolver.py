"""Command resolution: turn loosely typed payloads into a LightDelta.

Accepted payloads are booleans, the strings "on"/"off"/"toggle", a number
(brightness, also turns the light on) or a mapping of recognized keys. Each
category (color, saturation, temperature, brightness, power, infrared) is
resolved independently against the state before the command, so brightness
can be layered on top of a color change.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from lightsync.color import (
    clamp,
    hex_to_rgb,
    hsv_to_rgb,
    is_hex_color,
    rgb_to_hsv,
    round_half_up,
)
from lightsync.models.base import Capability, CapabilitySet, ColorMode
from lightsync.models.light import (
    BRIGHTNESS_RANGE,
    HUE_RANGE,
    INFRARED_RANGE,
    KELVIN_RANGE,
    MIRED_RANGE,
    SATURATION_RANGE,
    LightDelta,
    LightState,
)

logger = logging.getLogger(__name__)

RGB_CHANNELS = ("red", "green", "blue")
SATURATION_KEYS = ("sat", "saturation")
MIRED_KEYS = ("ct", "mirek", "mired")
BRIGHTNESS_KEYS = ("bri", "brightness")

RECOGNIZED_KEYS = frozenset(
    {
        "on",
        "hue",
        "hex",
        "rgb",
        "kelvin",
        "maxIR",
        *RGB_CHANNELS,
        *SATURATION_KEYS,
        *MIRED_KEYS,
        *BRIGHTNESS_KEYS,
    }
)

ON_WORDS = {"on": True, "true": True, "off": False, "false": False}
TOGGLE = "toggle"


@dataclass
class Resolution:
    """Outcome of resolving one payload."""

    delta: LightDelta = field(default_factory=LightDelta)
    duration: int = 0
    recognized: bool = True
    rejected: list[str] = field(default_factory=list)

    @property
    def is_unhandled(self) -> bool:
        """Payload had no recognized form at all."""
        return not self.recognized

    @property
    def is_invalid(self) -> bool:
        """Recognized keys were present but none of their values were usable."""
        return self.recognized and self.delta.is_empty and bool(self.rejected)


def parse_number(value: Any) -> float | None:
    """Parse a finite number or numeric string. Booleans are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_on(value: Any, current: bool) -> bool | None:
    """Parse an on/off representation, resolving toggle against ``current``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word == TOGGLE:
            return not current
        if word in ON_WORDS:
            return ON_WORDS[word]
    number = parse_number(value)
    if number is None:
        return None
    return number != 0


def normalize_payload(payload: Any) -> Mapping | None:
    """Convert scalar payload forms to a mapping. None if unhandled."""
    if isinstance(payload, Mapping):
        return payload
    if isinstance(payload, bool):
        return {"on": payload}
    if isinstance(payload, str):
        word = payload.strip().lower()
        if word == TOGGLE or word in ("on", "off"):
            return {"on": word}
    number = parse_number(payload)
    if number is not None:
        return {"on": True, "brightness": number}
    return None


def _number(payload: Mapping, key: str, rejected: list[str]) -> float | None:
    if key not in payload:
        return None
    number = parse_number(payload[key])
    if number is None:
        rejected.append(key)
    return number


def _first_number(payload: Mapping, keys: tuple[str, ...], rejected: list[str]) -> float | None:
    for key in keys:
        number = _number(payload, key, rejected)
        if number is not None:
            return number
    return None


def _clamped(value: float, bounds: tuple[int, int]) -> int:
    return int(clamp(round_half_up(value), *bounds))


def _rgb_list(value: Any) -> list[float] | None:
    if isinstance(value, (str, bytes, Mapping)):
        return None
    try:
        channels = [parse_number(v) for v in value]
    except TypeError:
        return None
    if len(channels) != 3 or any(c is None for c in channels):
        return None
    return channels


def _resolve_color(
    payload: Mapping,
    state: LightState,
    capabilities: CapabilitySet,
    delta: LightDelta,
    rejected: list[str],
) -> None:
    # Runs without COLOR capability too, so brightness can be extracted
    hsv: tuple[float, float, float] = (state.hue, state.saturation, state.brightness)
    changed = False

    hue = _number(payload, "hue", rejected)
    channels = {key: _number(payload, key, rejected) for key in RGB_CHANNELS}

    if hue is not None:
        hsv = (clamp(hue, *HUE_RANGE), hsv[1], hsv[2])
        changed = True
    elif any(value is not None for value in channels.values()):
        rgb = list(hsv_to_rgb(*hsv))
        for index, key in enumerate(RGB_CHANNELS):
            if channels[key] is not None:
                rgb[index] = channels[key]
        rgb = [clamp(c, 0, 255) for c in rgb]
        hsv = rgb_to_hsv(*rgb)
        changed = True
    elif "rgb" in payload and _rgb_list(payload["rgb"]) is not None:
        rgb = [clamp(c, 0, 255) for c in _rgb_list(payload["rgb"])]
        hsv = rgb_to_hsv(*rgb)
        changed = True
    elif "hex" in payload and is_hex_color(payload["hex"]):
        hsv = rgb_to_hsv(*hex_to_rgb(payload["hex"]))
        changed = True
    else:
        for key in ("rgb", "hex"):
            if key in payload:
                rejected.append(key)

    saturation = _first_number(payload, SATURATION_KEYS, rejected)
    if saturation is not None:
        hsv = (hsv[0], clamp(saturation, *SATURATION_RANGE), hsv[2])
        changed = True

    if not changed:
        return

    brightness = _clamped(hsv[2], BRIGHTNESS_RANGE)

    if Capability.COLOR not in capabilities:
        if brightness != round_half_up(state.brightness):
            delta.brightness = brightness
        return

    delta.hue = _clamped(hsv[0], HUE_RANGE) % 360
    delta.saturation = _clamped(hsv[1], SATURATION_RANGE)
    delta.brightness = brightness
    delta.mode = ColorMode.COLOR


def _resolve_temperature(
    payload: Mapping,
    capabilities: CapabilitySet,
    delta: LightDelta,
    rejected: list[str],
) -> None:
    if Capability.TEMPERATURE not in capabilities:
        return

    mired = _first_number(payload, MIRED_KEYS, rejected)
    if mired is not None:
        kelvin = 1_000_000 / clamp(mired, *MIRED_RANGE)
    else:
        kelvin = _number(payload, "kelvin", rejected)
        if kelvin is None:
            return

    delta.kelvin = _clamped(kelvin, KELVIN_RANGE)
    if delta.mode is None:
        delta.mode = ColorMode.TEMPERATURE


def resolve_command(
    payload: Any,
    state: LightState,
    capabilities: CapabilitySet,
) -> Resolution:
    """Resolve a payload against the current state.

    Args:
        payload: Command payload from the host
        state: Light state before the command
        capabilities: Capabilities of the light

    Returns:
        Resolution holding the delta and the transition duration in ms
    """
    data = normalize_payload(payload)
    if data is None or not any(key in data for key in RECOGNIZED_KEYS):
        return Resolution(recognized=False)

    resolution = Resolution()
    delta = resolution.delta
    rejected = resolution.rejected

    _resolve_color(data, state, capabilities, delta, rejected)
    _resolve_temperature(data, capabilities, delta, rejected)

    brightness = _first_number(data, BRIGHTNESS_KEYS, rejected)
    if brightness is not None:
        delta.brightness = _clamped(brightness, BRIGHTNESS_RANGE)

    if "on" in data:
        on = parse_on(data["on"], state.on)
        if on is None:
            rejected.append("on")
        else:
            delta.on = on

    max_ir = _number(data, "maxIR", rejected)
    if max_ir is not None:
        if Capability.INFRARED in capabilities:
            delta.max_ir = _clamped(max_ir, INFRARED_RANGE)
        else:
            logger.debug("Ignoring maxIR for light without infrared support")

    duration = parse_number(data.get("duration"))
    if duration is not None and duration > 0:
        resolution.duration = round_half_up(duration)

    return resolution
