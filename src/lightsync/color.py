"""Color model conversions for lightsync.

All functions are pure. Channel ranges are RGB 0-255, hue 0-360 and
saturation/value 0-100. Rounding is selectable per call: derived values use
``round_half_up`` while display values use ``math.floor``.
"""

import colorsys
import functools
import logging
import math
import re
from typing import Any, Callable

import webcolors

from lightsync.utils.errors import InvalidColorError

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]
HSV = tuple[int, int, int]

FALLBACK_RGB: RGB = (64, 64, 64)
FALLBACK_HSV: HSV = (0, 0, 25)

HEX_PATTERN = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positive input."""
    return math.floor(value + 0.5)


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Limit value to [minimum, maximum]. NaN becomes minimum."""
    if math.isnan(value):
        return minimum
    return max(minimum, min(maximum, value))


def with_fallback(fallback: Any) -> Callable:
    """Return ``fallback`` instead of raising when conversion arithmetic fails."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except (ArithmeticError, TypeError, ValueError) as e:
                logger.warning(f"{func.__name__}{args} failed, using fallback {fallback}: {e}")
                return fallback

        return wrapper

    return decorator


def is_hex_color(value: Any) -> bool:
    """Check if value is a 3 or 6 digit hex color, with optional '#'."""
    return isinstance(value, str) and HEX_PATTERN.match(value) is not None


def normalize_hex(hex_color: str) -> str:
    """Normalize a hex color to lowercase '#rrggbb'.

    Raises:
        InvalidColorError: If the string is not a hex color
    """
    if not is_hex_color(hex_color):
        raise InvalidColorError(f"Invalid hex color: {hex_color!r}")

    digits = hex_color.lstrip("#").lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert hex color to RGB.

    Args:
        hex_color: Color in hex format (e.g., "#FF0000" or "f00")

    Returns:
        Tuple of (red, green, blue) in 0-255

    Raises:
        InvalidColorError: If the string is not a hex color
    """
    digits = normalize_hex(hex_color)[1:]
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


@with_fallback("#{:02x}{:02x}{:02x}".format(*FALLBACK_RGB))
def rgb_to_hex(rgb: tuple[float, float, float]) -> str:
    """Convert RGB to lowercase '#rrggbb'."""
    r, g, b = (int(clamp(round_half_up(c), 0, 255)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


@with_fallback(FALLBACK_RGB)
def hsv_to_rgb(
    hue: float,
    saturation: float,
    value: float,
    rounding: Callable[[float], int] = round_half_up,
) -> RGB:
    """Convert HSV to RGB.

    Args:
        hue: Hue in degrees (0-360)
        saturation: Saturation (0-100)
        value: Value/brightness (0-100)
        rounding: Rounding applied to each channel

    Returns:
        Tuple of (red, green, blue) in 0-255
    """
    h = (clamp(hue, 0, 360) % 360) / 360.0
    s = clamp(saturation, 0, 100) / 100.0
    v = clamp(value, 0, 100) / 100.0

    r, g, b = colorsys.hsv_to_rgb(h, s, v)
    return (
        int(clamp(rounding(r * 255), 0, 255)),
        int(clamp(rounding(g * 255), 0, 255)),
        int(clamp(rounding(b * 255), 0, 255)),
    )


@with_fallback(FALLBACK_HSV)
def rgb_to_hsv(
    red: float,
    green: float,
    blue: float,
    rounding: Callable[[float], int] = round_half_up,
) -> HSV:
    """Convert RGB to HSV.

    Args:
        red: Red channel (0-255)
        green: Green channel (0-255)
        blue: Blue channel (0-255)
        rounding: Rounding applied to each component

    Returns:
        Tuple of (hue 0-360, saturation 0-100, value 0-100)
    """
    r = clamp(red, 0, 255) / 255.0
    g = clamp(green, 0, 255) / 255.0
    b = clamp(blue, 0, 255) / 255.0

    h, s, v = colorsys.rgb_to_hsv(r, g, b)
    return (
        int(clamp(rounding(h * 360), 0, 360)) % 360,
        int(clamp(rounding(s * 100), 0, 100)),
        int(clamp(rounding(v * 100), 0, 100)),
    )


@with_fallback(FALLBACK_RGB)
def kelvin_to_rgb(kelvin: float, rounding: Callable[[float], int] = round_half_up) -> RGB:
    """Convert a color temperature to RGB (Tanner Helland approximation).

    Args:
        kelvin: Color temperature in Kelvin, clamped to 1000-40000
        rounding: Rounding applied to each channel

    Returns:
        Tuple of (red, green, blue) in 0-255
    """
    temp = clamp(kelvin, 1000, 40000) / 100.0

    if temp <= 66:
        r = 255.0
        g = 99.4708025861 * math.log(temp) - 161.1195681661
    else:
        r = 329.698727446 * ((temp - 60) ** -0.1332047592)
        g = 288.1221695283 * ((temp - 60) ** -0.0755148492)

    if temp >= 66:
        b = 255.0
    elif temp <= 19:
        b = 0.0
    else:
        b = 138.5177312231 * math.log(temp - 10) - 305.0447927307

    return (
        int(clamp(rounding(r), 0, 255)),
        int(clamp(rounding(g), 0, 255)),
        int(clamp(rounding(b), 0, 255)),
    )


@functools.lru_cache(maxsize=1)
def _css3_palette() -> tuple[tuple[str, RGB], ...]:
    return tuple(
        (name, tuple(webcolors.name_to_rgb(name, spec=webcolors.CSS3)))
        for name in webcolors.names(webcolors.CSS3)
    )


def rgb_to_keyword(rgb: tuple[int, int, int]) -> str:
    """Return the nearest CSS3 color name for an RGB color."""
    try:
        return webcolors.rgb_to_name(tuple(rgb), spec=webcolors.CSS3)
    except ValueError:
        pass

    r, g, b = rgb
    name, _ = min(
        _css3_palette(),
        key=lambda item: (item[1][0] - r) ** 2 + (item[1][1] - g) ** 2 + (item[1][2] - b) ** 2,
    )
    return name
