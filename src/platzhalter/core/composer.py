"""Layout and rendering of placeholder images.

The composer works in two steps:

1. :func:`plan_layout` turns a :class:`RequestSpec` into a :class:`Layout`,
   an ordered list of draw operations with all geometry resolved.  The only
   thing it needs from the outside world is a way to measure text.
2. :func:`compose` replays a layout on a :class:`Renderer` and returns the
   encoded image.

Keeping the plan separate from the pixels means layout decisions (where the
label goes, whether there is a watermark) can be checked without decoding a
PNG.

Layout Rules
------------
- The canvas is filled with the background color (peach by default).
- A border is stroked around the canvas only when a border size was given.
  Its color defaults to black.  The stroke is centred on the canvas edge, so
  only the inner half of it is visible.
- The label is the dimension text exactly as requested, bold, sized
  ``width / len(label) * 1.2``.  Its *ink* box is centered on the canvas, so
  the glyphs look centered regardless of ascenders and descenders.
- The text color is near-black on light backgrounds and near-white on dark
  ones, see :func:`platzhalter.core.color.perceived_luminance`.
- Images at least ``WATERMARK_MIN_WIDTH`` wide get a half-transparent
  watermark in the bottom-right corner, pulled inwards by ``border / 1.5`` so
  it clears the border.

Coordinates
-----------
Text positions are baseline origins, the way Pillow places text with
``anchor="ls"``.  :class:`TextExtents` follows the same convention: the
bearings are offsets from the origin to the top-left of the ink box, so
``y_bearing`` is negative for text above the baseline.
"""

from __future__ import annotations

import functools
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from PIL import Image, ImageDraw, ImageFont

from platzhalter.core.color import Color, PerceivedLuminance, parse_hex
from platzhalter.core.errors import RenderError
from platzhalter.core.request_spec import RequestSpec

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND: Color = parse_hex("FFD8C2")
DEFAULT_BORDER: Color = parse_hex("000")
TEXT_DARK: Color = parse_hex("111827")
TEXT_LIGHT: Color = parse_hex("F9FAFB")

LABEL_SCALE = 1.2
WATERMARK_TEXT = "powered by platzhalter"
WATERMARK_MIN_WIDTH = 200
WATERMARK_MIN_FONT_SIZE = 12.0
WATERMARK_MAX_FONT_SIZE = 40.0
WATERMARK_ALPHA = 0.5
WATERMARK_MARGIN = 5.0


# ---------------------------------------------------------------------------
# Layout model.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FontSpec:
    size: float
    bold: bool = False


@dataclass(frozen=True)
class TextExtents:
    """Ink box of a piece of text relative to its baseline origin."""

    x_bearing: float
    y_bearing: float
    width: float
    height: float


@dataclass(frozen=True)
class FillOp:
    color: Color


@dataclass(frozen=True)
class BorderOp:
    line_width: int
    color: Color


@dataclass(frozen=True)
class TextOp:
    """Text drawn with its baseline origin at ``(x, y)``."""

    role: str
    text: str
    x: float
    y: float
    font: FontSpec
    color: Color
    alpha: float = 1.0


DrawOp = FillOp | BorderOp | TextOp

Measure = Callable[[str, FontSpec], TextExtents]


@dataclass
class Layout:
    width: int
    height: int
    ops: list[DrawOp] = field(default_factory=list)

    def text_ops(self, role: str) -> list[TextOp]:
        return [op for op in self.ops if isinstance(op, TextOp) and op.role == role]

    @property
    def label(self) -> TextOp:
        return self.text_ops("label")[0]

    @property
    def watermark(self) -> TextOp | None:
        found = self.text_ops("watermark")
        return found[0] if found else None

    @property
    def has_watermark(self) -> bool:
        return self.watermark is not None

    @property
    def border(self) -> BorderOp | None:
        return next((op for op in self.ops if isinstance(op, BorderOp)), None)


class Renderer(Protocol):
    """Drawing surface the composer drives."""

    width: int
    height: int

    def measure_text(self, text: str, font: FontSpec) -> TextExtents: ...

    def fill(self, color: Color) -> None: ...

    def stroke_border(self, line_width: int, color: Color) -> None: ...

    def draw_text(self, op: TextOp) -> None: ...

    def encode(self) -> bytes: ...


# ---------------------------------------------------------------------------
# Layout computation.
# ---------------------------------------------------------------------------


def text_color_for(background: Color) -> Color:
    """Pick the label color that contrasts best with ``background``."""
    if background.perceived_luminance() is PerceivedLuminance.LIGHT:
        return TEXT_DARK
    return TEXT_LIGHT


def label_font_size(width: int, label: str) -> float:
    return width / len(label) * LABEL_SCALE


def watermark_font_size(width: int, text: str) -> float:
    proposed = width / len(text)
    return min(max(proposed, WATERMARK_MIN_FONT_SIZE), WATERMARK_MAX_FONT_SIZE)


def center_on_canvas(width: int, height: int, extents: TextExtents) -> tuple[float, float]:
    """Return the origin that centers the ink box of ``extents``."""
    x = width / 2.0 - (extents.width / 2.0 + extents.x_bearing)
    y = height / 2.0 - (extents.height / 2.0 + extents.y_bearing)
    return x, y


def plan_layout(
    spec: RequestSpec,
    measure: Measure,
    *,
    watermark_text: str = WATERMARK_TEXT,
) -> Layout:
    """Compute every draw operation for ``spec``.

    Args:
        spec: The validated request.
        measure: Returns the ink extents of a text in a given font.  Usually
            :meth:`Renderer.measure_text`.
        watermark_text: Text of the bottom-right watermark.

    Returns:
        The layout, with operations in paint order.
    """
    width, height = spec.width, spec.height
    image_config = spec.config
    layout = Layout(width=width, height=height)

    background = image_config.bg or DEFAULT_BACKGROUND
    layout.ops.append(FillOp(background))

    if image_config.br_s is not None:
        layout.ops.append(BorderOp(image_config.br_s, image_config.br or DEFAULT_BORDER))

    text_color = text_color_for(background)

    label = spec.raw_dimensions
    label_font = FontSpec(size=label_font_size(width, label), bold=True)
    x, y = center_on_canvas(width, height, measure(label, label_font))
    layout.ops.append(TextOp("label", label, x, y, label_font, text_color))

    if width >= WATERMARK_MIN_WIDTH:
        inset = (image_config.br_s or 0) / 1.5
        mark_font = FontSpec(size=watermark_font_size(width, watermark_text), bold=False)
        extents = measure(watermark_text, mark_font)
        x = width - extents.width - WATERMARK_MARGIN - inset
        y = height + extents.y_bearing / 2.0 - inset
        layout.ops.append(
            TextOp("watermark", watermark_text, x, y, mark_font, text_color, WATERMARK_ALPHA)
        )

    return layout


def compose(
    spec: RequestSpec,
    renderer: Renderer,
    *,
    watermark_text: str = WATERMARK_TEXT,
) -> bytes:
    """Lay out ``spec``, draw it on ``renderer``, and return the encoded image.

    Raises:
        RenderError: Propagated from the renderer.
    """
    layout = plan_layout(spec, renderer.measure_text, watermark_text=watermark_text)

    for op in layout.ops:
        if isinstance(op, FillOp):
            renderer.fill(op.color)
        elif isinstance(op, BorderOp):
            renderer.stroke_border(op.line_width, op.color)
        else:
            renderer.draw_text(op)

    return renderer.encode()


# ---------------------------------------------------------------------------
# Pillow renderer.
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=64)
def load_font(name: str, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a TrueType font, falling back to Pillow's bundled font.

    Args:
        name: Font file name or path, resolved by ``ImageFont.truetype``.
        size: Font size in pixels.
    """
    # FreeType rejects sizes below one pixel; 10x10 labels come close.
    size = max(size, 1.0)
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        logger.warning(f"Font {name!r} not found, using Pillow's default font")
        return ImageFont.load_default(size)


class PillowRenderer:
    """Renders placeholders onto an in-memory Pillow image.

    Colors are passed as RGB triples only; the alpha marker of
    :class:`Color` never reaches the canvas.  Partial opacity is applied by
    drawing onto a transparent overlay and compositing it.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        label_font: str = "DejaVuSans-Bold.ttf",
        watermark_font: str = "DejaVuSans.ttf",
    ) -> None:
        self.width = width
        self.height = height
        self._label_font = label_font
        self._watermark_font = watermark_font
        try:
            self._image = Image.new("RGB", (width, height))
        except (ValueError, MemoryError) as e:
            raise RenderError(f"cannot create {width}x{height} canvas: {e}") from e
        self._draw = ImageDraw.Draw(self._image)

    def _font(self, font: FontSpec):
        name = self._label_font if font.bold else self._watermark_font
        return load_font(name, font.size)

    def measure_text(self, text: str, font: FontSpec) -> TextExtents:
        try:
            left, top, right, bottom = self._draw.textbbox(
                (0, 0), text, font=self._font(font), anchor="ls"
            )
        except (OSError, ValueError) as e:
            raise RenderError(f"cannot measure text {text!r}: {e}") from e
        return TextExtents(x_bearing=left, y_bearing=top, width=right - left, height=bottom - top)

    def fill(self, color: Color) -> None:
        try:
            self._draw.rectangle((0, 0, self.width, self.height), fill=color.rgb())
        except (OSError, ValueError) as e:
            raise RenderError(f"cannot fill canvas: {e}") from e

    def stroke_border(self, line_width: int, color: Color) -> None:
        """Stroke a line of ``line_width`` centred on the canvas edge.

        Only the inner half of the line lands on the canvas, which is what
        the watermark inset of ``line_width / 1.5`` is sized for.
        """
        visible = line_width - line_width // 2
        try:
            self._draw.rectangle(
                (0, 0, self.width - 1, self.height - 1),
                outline=color.rgb(),
                width=visible,
            )
        except (OSError, ValueError) as e:
            raise RenderError(f"cannot stroke {line_width}px border: {e}") from e

    def draw_text(self, op: TextOp) -> None:
        font = self._font(op.font)
        try:
            if op.alpha >= 1.0:
                self._draw.text((op.x, op.y), op.text, fill=op.color.rgb(), font=font, anchor="ls")
                return

            overlay = Image.new("RGBA", self._image.size, (0, 0, 0, 0))
            ImageDraw.Draw(overlay).text(
                (op.x, op.y),
                op.text,
                fill=(*op.color.rgb(), round(op.alpha * 255)),
                font=font,
                anchor="ls",
            )
            composited = Image.alpha_composite(self._image.convert("RGBA"), overlay)
            self._image = composited.convert("RGB")
            self._draw = ImageDraw.Draw(self._image)
        except (OSError, ValueError) as e:
            raise RenderError(f"cannot draw text {op.text!r}: {e}") from e

    def encode(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self._image.save(buffer, format="PNG")
        except OSError as e:
            raise RenderError(f"cannot encode image: {e}") from e
        return buffer.getvalue()


def render_placeholder(
    spec: RequestSpec,
    *,
    label_font: str = "DejaVuSans-Bold.ttf",
    watermark_font: str = "DejaVuSans.ttf",
    watermark_text: str = WATERMARK_TEXT,
) -> bytes:
    """Render ``spec`` to PNG bytes with a fresh :class:`PillowRenderer`."""
    renderer = PillowRenderer(
        spec.width,
        spec.height,
        label_font=label_font,
        watermark_font=watermark_font,
    )
    data = compose(spec, renderer, watermark_text=watermark_text)
    logger.info(f"Rendered {spec.raw_dimensions} placeholder ({len(data)} bytes)")
    return data
