"""
Rich text layout and rendering for the card layout module.

A RichText parses its markup into lines of chunks, lays every non-empty chunk
out as a positioned run, and tracks the bounds of all runs. Runs are placed
left to right on a line and lines are stacked by the largest line spacing of
their fonts. Positions are rounded to whole pixels so glyphs are not blurred.

Pillow has no synthetic styles, so they are emulated when drawing: bold adds a
fill-colored stroke, italic shears the glyphs around the baseline, and
underline/strikethrough are drawn as filled rectangles.
"""

import logging
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont

from core.constants import (
    BOLD_STROKE_DIVISOR,
    DECORATION_DIVISOR,
    DEFAULT_CHARACTER_SIZE,
    ITALIC_SHEAR,
    MIN_CHARACTER_SIZE,
)
from .context import RenderContext, default_context
from .errors import MarkupError
from .font_manager import FontFace
from .image_processor import composite_layer
from .markup import parse_markup, plain_text
from .models import Alignment, Color, FloatRect, Format, Line, Style, round_half_away
from .transform import Transform, Transformable

logger = logging.getLogger(__name__)

BBox = Tuple[float, float, float, float]  # (left, top, right, bottom)


@dataclass(frozen=True)
class PositionedRun:
    """A styled text run at a pixel position relative to the rich text origin."""
    text: str
    format: Format
    character_size: int
    x: int
    y: int
    line_index: int = 0

    @property
    def font(self) -> FontFace:
        return self.format.font  # type: ignore[return-value]

    @property
    def style(self) -> Style:
        return self.format.style

    @property
    def fill_color(self) -> Color:
        return self.format.fill_color

    @property
    def outline_color(self) -> Color:
        return self.format.outline_color

    @property
    def outline_thickness(self) -> float:
        return self.format.outline_thickness

    def pil_font(self) -> ImageFont.FreeTypeFont:
        return self.font.get(self.character_size)

    @property
    def bold_width(self) -> int:
        if self.style & Style.BOLD:
            return max(1, round_half_away(self.character_size / BOLD_STROKE_DIVISOR))
        return 0

    @property
    def outline_width(self) -> int:
        return round_half_away(self.outline_thickness)

    @property
    def decoration_thickness(self) -> int:
        return max(1, round_half_away(self.character_size / DECORATION_DIVISOR))

    def advance(self) -> float:
        """Horizontal distance from this run's position to the next character's."""
        if not self.text:
            return 0.0
        return float(self.pil_font().getlength(self.text))

    def local_bbox(self) -> BBox:
        """Extent of the drawn run relative to its position."""
        if not self.text:
            return (0.0, 0.0, 0.0, 0.0)
        font = self.pil_font()
        ascent = font.getmetrics()[0]
        left, top, right, bottom = (float(v) for v in font.getbbox(
            self.text, anchor="la", stroke_width=self.bold_width + self.outline_width))

        if self.style & Style.ITALIC:
            left -= ITALIC_SHEAR * max(0.0, bottom - ascent)
            right += ITALIC_SHEAR * max(0.0, ascent - top)

        if self.style & (Style.UNDERLINED | Style.STRIKE_THROUGH):
            advance = self.advance()
            left = min(left, 0.0)
            right = max(right, advance)
            if self.style & Style.UNDERLINED:
                bottom = max(bottom, float(self._underline_top(ascent) + self.decoration_thickness))
        return (left, top, right, bottom)

    def global_bbox(self) -> BBox:
        """Extent of the drawn run in rich text coordinates."""
        if not self.text:
            return (float(self.x), float(self.y), float(self.x), float(self.y))
        left, top, right, bottom = self.local_bbox()
        return (self.x + left, self.y + top, self.x + right, self.y + bottom)

    def _underline_top(self, ascent: int) -> int:
        return ascent + self.decoration_thickness

    def _strike_top(self, font: ImageFont.FreeTypeFont, ascent: int) -> int:
        # Middle of the x-height, measured from the top of the line
        _, x_top, _, _ = font.getbbox("x", anchor="ls")
        return ascent + round_half_away(x_top / 2) - self.decoration_thickness // 2

    def render(self) -> Tuple[Image.Image, int, int]:
        """
        Draw the run onto its own transparent layer.

        Returns:
            Tuple of (layer, left, top) where left/top place the layer in rich
            text coordinates
        """
        left, top, right, bottom = self.local_bbox()
        layer_left, layer_top = math.floor(left), math.floor(top)
        width = max(1, math.ceil(right) - layer_left)
        height = max(1, math.ceil(bottom) - layer_top)
        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = self.pil_font()
        ascent = font.getmetrics()[0]
        ox, oy = -layer_left, -layer_top

        if self.outline_width > 0:
            draw.text(
                (ox, oy), self.text, font=font, anchor="la",
                fill=self.outline_color.to_rgba(),
                stroke_width=self.bold_width + self.outline_width,
                stroke_fill=self.outline_color.to_rgba(),
            )
        draw.text(
            (ox, oy), self.text, font=font, anchor="la",
            fill=self.fill_color.to_rgba(),
            stroke_width=self.bold_width,
            stroke_fill=self.fill_color.to_rgba(),
        )

        if self.style & Style.ITALIC:
            baseline = oy + ascent
            layer = layer.transform(
                layer.size,
                Image.Transform.AFFINE,
                data=(1.0, ITALIC_SHEAR, -ITALIC_SHEAR * baseline, 0.0, 1.0, 0.0),
                resample=Image.Resampling.BILINEAR,
            )
            draw = ImageDraw.Draw(layer)

        advance = max(1.0, self.advance())
        thickness = self.decoration_thickness
        if self.style & Style.UNDERLINED:
            y0 = oy + self._underline_top(ascent)
            draw.rectangle([ox, y0, ox + advance - 1, y0 + thickness - 1], fill=self.fill_color.to_rgba())
        if self.style & Style.STRIKE_THROUGH:
            y0 = oy + self._strike_top(font, ascent)
            draw.rectangle([ox, y0, ox + advance - 1, y0 + thickness - 1], fill=self.fill_color.to_rgba())

        return layer, self.x + layer_left, self.y + layer_top


class RichText(Transformable):
    """
    Formatted multi-line text built from markup.

    Setting ``source`` or ``character_size`` rebuilds the lines, runs and bounds
    immediately.
    """

    def __init__(
        self,
        source: str = "",
        character_size: int = DEFAULT_CHARACTER_SIZE,
        context: Optional[RenderContext] = None,
        base_dir: Optional[Path] = None,
    ):
        """
        Args:
            source: Markup source
            character_size: Character size in pixels (clamped to at least 1)
            context: Colors and fonts used by tags (default: process-wide)
            base_dir: Directory relative font paths are resolved against
        """
        super().__init__()
        self.context = context or default_context()
        self.base_dir = base_dir
        self._character_size = max(int(character_size), MIN_CHARACTER_SIZE)
        self._source = ""
        self.lines: List[Line] = []
        self.runs: List[PositionedRun] = []
        self._bounds = FloatRect()
        self.set_source(source)

    @property
    def source(self) -> str:
        return self._source

    @source.setter
    def source(self, value: str) -> None:
        self.set_source(value)

    @property
    def character_size(self) -> int:
        return self._character_size

    @character_size.setter
    def character_size(self, value: int) -> None:
        self.set_character_size(value)

    def get_source(self) -> str:
        return self._source

    def set_source(self, source: str) -> None:
        self._source = source
        self._rebuild()

    def get_character_size(self) -> int:
        return self._character_size

    def set_character_size(self, size: int) -> None:
        self._character_size = max(int(size), MIN_CHARACTER_SIZE)
        self._rebuild()

    def get_string(self) -> str:
        """The text with all formatting removed, lines joined by newlines."""
        return plain_text(self.lines)

    def clear(self) -> None:
        self.runs = []
        self._bounds = FloatRect()

    def get_local_bounds(self) -> FloatRect:
        return self._bounds

    def get_global_bounds(self) -> FloatRect:
        return self.get_transform().transform_rect(self._bounds)

    def _rebuild(self) -> None:
        self.clear()
        self.lines = parse_markup(self._source, self.context, self.base_dir)

        size = self._character_size
        cursor_x, cursor_y = 0.0, 0.0
        width, height = 0.0, 0.0
        runs: List[PositionedRun] = []

        for index, line in enumerate(self.lines):
            line_spacing = 0.0
            for chunk in line.chunks:
                if chunk.format.font is None:
                    if chunk.text:
                        raise MarkupError("Text missing font specification.")
                    continue
                line_spacing = max(line_spacing, chunk.format.font.line_spacing(size))
                if not chunk.text:
                    # An empty run still reaches its position
                    width = max(width, float(round_half_away(cursor_x)))
                    height = max(height, float(round_half_away(cursor_y)))
                    continue

                run = PositionedRun(
                    text=chunk.text,
                    format=chunk.format,
                    character_size=size,
                    x=round_half_away(cursor_x),
                    y=round_half_away(cursor_y),
                    line_index=index,
                )
                runs.append(run)
                cursor_x = run.x + run.advance()
                cursor_y = run.y

                _, _, right, bottom = run.global_bbox()
                width = max(width, right)
                height = max(height, bottom)

            if index < len(self.lines) - 1:
                if line_spacing == 0.0:
                    # A line break needs a font to know how far to advance
                    raise MarkupError("Text missing font specification.")
                cursor_x = 0.0
                cursor_y += line_spacing

        self.runs = self._align(runs, width)
        self._bounds = FloatRect(0.0, 0.0, width, height)
        logger.debug(f"Laid out {len(self.runs)} runs in {len(self.lines)} lines, bounds {self._bounds}")

    def _align(self, runs: List[PositionedRun], width: float) -> List[PositionedRun]:
        """Shift the runs of centered and right-aligned lines within the bounds width."""
        aligned: List[PositionedRun] = []
        for index, line in enumerate(self.lines):
            line_runs = [run for run in runs if run.line_index == index]
            if not line_runs or line.alignment == Alignment.LEFT:
                aligned.extend(line_runs)
                continue
            line_right = max(run.global_bbox()[2] for run in line_runs)
            free = width - line_right
            if line.alignment == Alignment.CENTER:
                shift = round_half_away(free / 2)
            else:
                shift = round_half_away(free)
            aligned.extend(replace(run, x=run.x + shift) for run in line_runs)
        return aligned

    def render_layer(self) -> Tuple[Optional[Image.Image], int, int]:
        """
        Draw all runs onto one transparent layer in local coordinates.

        Returns:
            Tuple of (layer, left, top); layer is None when there is nothing to draw
        """
        rendered = [run.render() for run in self.runs]
        if not rendered:
            return None, 0, 0

        left = min(x for _, x, _ in rendered)
        top = min(y for _, _, y in rendered)
        right = max(x + img.width for img, x, _ in rendered)
        bottom = max(y + img.height for img, _, y in rendered)
        layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        for img, x, y in rendered:
            layer.alpha_composite(img, dest=(x - left, y - top))
        return layer, left, top

    def draw(self, canvas: Image.Image, transform: Optional[Transform] = None) -> None:
        """
        Draw the text onto an RGBA canvas using this object's transform.

        Args:
            canvas: Destination image
            transform: Parent transform applied after this object's own
        """
        layer, left, top = self.render_layer()
        if layer is None:
            return
        full = self.get_transform() @ Transform.translation(left, top)
        if transform is not None:
            full = transform @ full
        composite_layer(canvas, layer, full)
