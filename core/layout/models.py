"""
Data models for the card layout module.

Defines colors, text formats, the chunk/line structure produced by the markup
parser, and the card document (elements and their text or image content).
"""

import math
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Literal, TypeVar, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .font_manager import FontFace

# Type aliases for clarity
Vector2 = Tuple[float, float]
Size = Tuple[int, int]  # (width, height) in pixels

T = TypeVar("T")


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True)
class Color:
    """An RGBA color with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_argb(cls, argb_hex: int) -> "Color":
        """Build a color from a 32-bit ARGB value. Alpha is always forced opaque."""
        argb_hex = (argb_hex | 0xFF000000) & 0xFFFFFFFF
        return cls(
            (argb_hex >> 16) & 0xFF,
            (argb_hex >> 8) & 0xFF,
            argb_hex & 0xFF,
            (argb_hex >> 24) & 0xFF,
        )

    @property
    def argb(self) -> int:
        return (self.a << 24) | (self.r << 16) | (self.g << 8) | self.b

    def to_rgba(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def __str__(self) -> str:
        return f"#{self.argb:08x}"


WHITE = Color(255, 255, 255, 255)


class Style(IntFlag):
    """Text style flags toggled by markup metacharacters."""
    REGULAR = 0
    BOLD = 1
    ITALIC = 2
    UNDERLINED = 4
    STRIKE_THROUGH = 8


class Alignment(Enum):
    """Horizontal alignment of a line within the text bounds."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Format:
    """Immutable format snapshot attached to a chunk."""

    font: Optional["FontFace"] = None
    style: Style = Style.REGULAR
    fill_color: Color = WHITE
    outline_color: Color = WHITE
    outline_thickness: float = 0.0


@dataclass
class Chunk:
    """Contiguous text sharing a single format."""
    format: Format
    text: str = ""


@dataclass
class Line:
    """Chunks between two newlines, plus the line's alignment."""
    chunks: List[Chunk] = field(default_factory=list)
    alignment: Alignment = Alignment.LEFT

    @property
    def text(self) -> str:
        return "".join(chunk.text for chunk in self.chunks)


@dataclass(frozen=True)
class FloatRect:
    """Axis-aligned rectangle (left, top, width, height)."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def size(self) -> Vector2:
        return (self.width, self.height)


@dataclass(frozen=True)
class TextContent:
    """Rich text element content."""

    markup: str
    character_size: int
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class ImageContent:
    """Image file element content; size is relative to the canvas."""

    path: str
    size: Vector2 = (1.0, 1.0)
    kind: Literal["image"] = "image"


Content = Union[TextContent, ImageContent]


def match_content(
    content: Content,
    on_text: Callable[[TextContent], T],
    on_image: Callable[[ImageContent], T],
) -> T:
    """Dispatch on the element content variant."""
    if content.kind == "text":
        return on_text(content)  # type: ignore[arg-type]
    if content.kind == "image":
        return on_image(content)  # type: ignore[arg-type]
    raise TypeError(f"Unknown element content kind: {content.kind!r}")


@dataclass(frozen=True)
class Element:
    """One drawable unit on the card."""

    content: Content
    position: Vector2 = (0.0, 0.0)  # fraction of canvas size
    origin: Vector2 = (0.0, 0.0)  # fraction of the element's own bounds


@dataclass(frozen=True)
class CardSpec:
    """A fixed-size card and its elements in draw order."""

    size: Size
    elements: Tuple[Element, ...] = ()
    base_dir: Optional[Path] = None  # directory relative resource paths resolve against
