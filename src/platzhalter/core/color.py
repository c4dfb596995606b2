"""Hex color parsing and perceived luminance.

Colors arrive as bare hex strings in the query string (``bg=ffd8c2``,
``br=000``).  This module turns them into :class:`Color` values and decides
whether a color reads as light or dark, which the composer uses to pick a
legible text color without a lookup table.

Perceived Luminance
-------------------
The classification follows the CIE pipeline:

1. Scale each 8-bit channel to ``[0, 1]``.
2. Undo the sRGB transfer curve (``srgb_to_linear``).
3. Weight the linear channels into relative luminance ``Y``.
4. Convert ``Y`` to perceptual lightness ``L*`` (0-100).
5. ``L* >= 80`` is :attr:`PerceivedLuminance.LIGHT`, anything below is
   :attr:`PerceivedLuminance.DARK`.

Alpha
-----
The hex format has no alpha component.  Every parsed color carries
``OPAQUE_MARKER`` (1) as its alpha, which is *not* the conventional 255.
Rendering only ever uses the RGB channels, so the marker is never visible in
an image, but it does take part in fingerprinting.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from platzhalter.core.errors import InvalidColorHex, InvalidColorLength

OPAQUE_MARKER = 1

LIGHTNESS_THRESHOLD = 80.0

# Compiled once and shared by every request.
HEX_COLOR_PATTERN: re.Pattern[str] = re.compile(r"(?:[0-9a-fA-F]{2}){3}|[0-9a-fA-F]{3}")

_HEX_DIGITS = frozenset("0123456789abcdef")


class PerceivedLuminance(Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class ScaledColor:
    """Channels scaled to floats for rendering and luminance math."""

    r: float
    g: float
    b: float
    a: float

    def rgb(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class Color:
    """An 8-bit RGB color with a fixed alpha marker.

    Use :func:`parse_hex` to build one.
    """

    r: int
    g: int
    b: int
    a: int = OPAQUE_MARKER

    def to_scaled(self) -> ScaledColor:
        return to_scaled(self)

    def perceived_luminance(self) -> PerceivedLuminance:
        return perceived_luminance(self)

    def rgb(self) -> tuple[int, int, int]:
        """Return the channels without alpha, as passed to the renderer."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"{self.r:02x}{self.g:02x}{self.b:02x}"


def parse_hex(value: str) -> Color:
    """Parse a 3 or 6 character hex string into a :class:`Color`.

    Three character shorthand is expanded by doubling every character, so
    ``"abc"`` means ``"aabbcc"``.  Parsing is case-insensitive.

    Args:
        value: Hex digits without a leading ``#``.

    Returns:
        The parsed color with alpha set to ``OPAQUE_MARKER``.

    Raises:
        InvalidColorLength: If ``value`` is not 3 or 6 characters long.
        InvalidColorHex: If any byte pair is not hexadecimal.
    """
    if len(value) not in (3, 6):
        raise InvalidColorLength(value)

    normalized = value.lower()
    if len(normalized) == 3:
        normalized = "".join(ch * 2 for ch in normalized)

    channels = []
    for start in (0, 2, 4):
        pair = normalized[start : start + 2]
        # int(..., 16) also accepts signs, whitespace and underscores.
        if not set(pair) <= _HEX_DIGITS:
            raise InvalidColorHex(value)
        channels.append(int(pair, 16))

    red, green, blue = channels
    return Color(r=red, g=green, b=blue, a=OPAQUE_MARKER)


def parse_optional_color(
    value: str | None,
    pattern: re.Pattern[str] = HEX_COLOR_PATTERN,
) -> Color | None:
    """Parse an optional query-string color.

    Missing or malformed values are treated as absent rather than as an
    error, so the caller falls back to the default color.
    """
    if value is None:
        return None
    if pattern.fullmatch(value) is None:
        return None
    return parse_hex(value)


def to_scaled(color: Color) -> ScaledColor:
    return ScaledColor(
        r=color.r / 255.0,
        g=color.g / 255.0,
        b=color.b / 255.0,
        a=float(color.a),
    )


def srgb_to_linear(channel: float) -> float:
    """Undo the sRGB gamma curve for one channel in ``[0, 1]``."""
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    scaled = to_scaled(color)
    r = srgb_to_linear(scaled.r)
    g = srgb_to_linear(scaled.g)
    b = srgb_to_linear(scaled.b)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def lightness(luminance: float) -> float:
    """Convert relative luminance ``Y`` to CIE ``L*``."""
    if luminance <= 216.0 / 24389.0:
        return luminance * (24389.0 / 27.0)
    return luminance ** (1.0 / 3.0) * 116.0 - 16.0


def perceived_luminance(color: Color) -> PerceivedLuminance:
    """Classify ``color`` as light or dark for picking a text color."""
    if lightness(relative_luminance(color)) >= LIGHTNESS_THRESHOLD:
        return PerceivedLuminance.LIGHT
    return PerceivedLuminance.DARK
