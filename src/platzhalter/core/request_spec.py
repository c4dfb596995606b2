"""Request parsing and validation.

A request arrives as a path segment (``"400x300"``) plus three optional
query parameters.  :func:`build_request_spec` validates the dimensions,
parses the colors, and freezes everything into a :class:`RequestSpec` that
the fingerprint, the cache, and the composer share.

Render defaults (peach background, black border) are deliberately *not*
applied here.  A spec remembers exactly which options the caller supplied so
that "absent" and "present with the default value" stay distinguishable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from platzhalter.core.color import HEX_COLOR_PATTERN, Color, parse_optional_color
from platzhalter.core.errors import DimensionTooLarge, InvalidBorderSize, InvalidDimensionFormat

logger = logging.getLogger(__name__)

MAX_DIMENSION = 3000

# At least two digits per side and no leading zero, so the smallest image is
# 10x10.  Compiled once and shared by every request.
DIMENSION_PATTERN: re.Pattern[str] = re.compile(r"(?P<width>[1-9][0-9]+)x(?P<height>[1-9][0-9]+)")


@dataclass(frozen=True)
class ImageConfig:
    """Optional styling of a placeholder.

    Attributes:
        bg: Background color, or ``None`` for the default.
        br: Border color, or ``None`` for the default.
        br_s: Border thickness (0-255).  ``None`` means no border is drawn.
    """

    bg: Color | None = None
    br: Color | None = None
    br_s: int | None = None


@dataclass(frozen=True)
class RequestSpec:
    """A validated placeholder request.

    Attributes:
        raw_dimensions: The dimension text exactly as received.  It doubles
            as the label drawn on the image.
        width: Parsed width in pixels.
        height: Parsed height in pixels.
        config: Optional styling.
    """

    raw_dimensions: str
    width: int
    height: int
    config: ImageConfig = field(default_factory=ImageConfig)


def parse_dimensions(
    raw: str,
    *,
    pattern: re.Pattern[str] = DIMENSION_PATTERN,
    max_dimension: int = MAX_DIMENSION,
) -> tuple[int, int]:
    """Parse ``WIDTHxHEIGHT`` into integers.

    Raises:
        InvalidDimensionFormat: If ``raw`` does not match ``pattern``.
        DimensionTooLarge: If either side exceeds ``max_dimension``.
    """
    match = pattern.fullmatch(raw)
    if match is None:
        raise InvalidDimensionFormat(raw)

    width = int(match.group("width"))
    height = int(match.group("height"))
    if width > max_dimension or height > max_dimension:
        raise DimensionTooLarge(width, height, max_dimension)

    return width, height


def parse_image_config(
    bg: str | None = None,
    br: str | None = None,
    br_s: int | None = None,
    *,
    color_pattern: re.Pattern[str] = HEX_COLOR_PATTERN,
) -> ImageConfig:
    """Build an :class:`ImageConfig` from raw query values.

    Colors that are missing or malformed become ``None``.  The border size is
    kept as given; it must already fit in an unsigned byte.
    """
    if br_s is not None and not 0 <= br_s <= 255:
        raise InvalidBorderSize(f"border size must be between 0 and 255, got {br_s}")

    bg_color = parse_optional_color(bg, color_pattern)
    br_color = parse_optional_color(br, color_pattern)

    if bg is not None and bg_color is None:
        logger.debug(f"Ignoring malformed background color {bg!r}")
    if br is not None and br_color is None:
        logger.debug(f"Ignoring malformed border color {br!r}")

    return ImageConfig(bg=bg_color, br=br_color, br_s=br_s)


def build_request_spec(
    raw_dimensions: str,
    *,
    bg: str | None = None,
    br: str | None = None,
    br_s: int | None = None,
    max_dimension: int = MAX_DIMENSION,
) -> RequestSpec:
    """Validate a raw request and return its :class:`RequestSpec`.

    Args:
        raw_dimensions: Path segment such as ``"400x300"``.
        bg: Optional background hex color.
        br: Optional border hex color.
        br_s: Optional border thickness.
        max_dimension: Upper bound for width and height.

    Raises:
        InvalidDimensionFormat: Malformed dimension text.
        DimensionTooLarge: Width or height above ``max_dimension``.
        InvalidBorderSize: ``br_s`` outside 0-255.
    """
    width, height = parse_dimensions(raw_dimensions, max_dimension=max_dimension)
    image_config = parse_image_config(bg, br, br_s)
    return RequestSpec(
        raw_dimensions=raw_dimensions,
        width=width,
        height=height,
        config=image_config,
    )
