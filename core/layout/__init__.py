"""
Card layout module for CardGen.

Provides the rich text markup engine and the card compositor:

- Color registry and font cache shared through a render context
- Markup tokenizer and format state machine
- Rich text layout with per-run fonts, styles and colors
- Card rendering of text and image elements onto a raster canvas
"""

from .models import (
    Color,
    Style,
    Alignment,
    Format,
    Chunk,
    Line,
    FloatRect,
    TextContent,
    ImageContent,
    Element,
    CardSpec,
    match_content,
    Size,
    Vector2,
)
from .errors import CardGenError, MarkupError, ResourceError, DocumentError
from .colors import ColorRegistry
from .font_manager import FontFace, FontManager
from .context import RenderContext, default_context, add_color
from .markup import Token, TokenType, FormatBuilder, tokenize, parse_markup, plain_text
from .transform import Transform, Transformable
from .image_processor import ImageProcessor, Sprite, composite_layer
from .text_renderer import RichText, PositionedRun
from .engine import CardRenderer, parse_card_document, load_card_json

__all__ = [
    # Data models
    "Color",
    "Style",
    "Alignment",
    "Format",
    "Chunk",
    "Line",
    "FloatRect",
    "TextContent",
    "ImageContent",
    "Element",
    "CardSpec",
    "match_content",
    "Size",
    "Vector2",
    # Errors
    "CardGenError",
    "MarkupError",
    "ResourceError",
    "DocumentError",
    # Shared resources
    "ColorRegistry",
    "FontFace",
    "FontManager",
    "RenderContext",
    "default_context",
    "add_color",
    # Markup
    "Token",
    "TokenType",
    "FormatBuilder",
    "tokenize",
    "parse_markup",
    "plain_text",
    # Rendering
    "Transform",
    "Transformable",
    "ImageProcessor",
    "Sprite",
    "composite_layer",
    "RichText",
    "PositionedRun",
    "CardRenderer",
    "parse_card_document",
    "load_card_json",
]
