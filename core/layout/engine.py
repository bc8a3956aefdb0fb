"""
Card rendering for the card layout module.

Handles loading card documents from JSON and compositing their text and image
elements onto a transparent canvas that is saved as PNG (or any format Pillow
infers from the output extension).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from PIL import Image

from core.constants import DEFAULT_CHARACTER_SIZE, DEFAULT_IMAGE_SIZE, DEFAULT_ORIGIN, DEFAULT_POSITION
from core.logging_config import ErrorLogger
from .context import RenderContext, default_context
from .errors import DocumentError
from .image_processor import ImageProcessor, Sprite
from .models import (
    CardSpec, Content, Element, ImageContent, TextContent, Vector2,
    match_content, round_half_away,
)
from .text_renderer import RichText

logger = logging.getLogger(__name__)

# Output formats that cannot store an alpha channel
OPAQUE_FORMATS = (".jpg", ".jpeg", ".bmp")


class CardRenderer:
    """
    Composites a card's elements onto a canvas of the card's size.

    Elements are drawn in list order. Each element is placed at its position
    (a fraction of the canvas size) and anchored by its origin (a fraction of
    the element's own size).
    """

    def __init__(self, card: CardSpec, context: Optional[RenderContext] = None):
        """
        Initialize the renderer.

        Args:
            card: Card to render
            context: Colors and fonts used by text elements (default: process-wide)
        """
        self.card = card
        self.context = context or default_context()

    def render_image(self) -> Image.Image:
        """Draw every element and return the finished RGBA canvas."""
        width, height = self.card.size
        canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))

        for index, element in enumerate(self.card.elements):
            with ErrorLogger(f"rendering element {index} ({element.content.kind})", logger):
                anchor = self._anchor(element.position)
                match_content(
                    element.content,
                    lambda text: self._draw_text(canvas, element, text, anchor),
                    lambda image: self._draw_image(canvas, element, image, anchor),
                )
        return canvas

    def render(self, output_path: Union[str, Path]) -> bool:
        """
        Render the card and save it.

        Returns:
            True if the image was written, False if saving failed

        Raises:
            CardGenError: If markup, fonts or images fail before anything is saved
        """
        out_path = Path(output_path)
        logger.info(f"Rendering card {self.card.size[0]}x{self.card.size[1]} to {out_path}")
        canvas = self.render_image()

        if out_path.suffix.lower() in OPAQUE_FORMATS:
            canvas = canvas.convert("RGB")
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            canvas.save(out_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save card image to {out_path}: {e}")
            return False

        logger.info(f"Card rendered successfully to {out_path}")
        return True

    def _anchor(self, position: Vector2) -> Vector2:
        width, height = self.card.size
        return (
            float(round_half_away(width * position[0])),
            float(round_half_away(height * position[1])),
        )

    def _draw_text(self, canvas: Image.Image, element: Element, content: TextContent, anchor: Vector2) -> None:
        rich_text = RichText(content.markup, content.character_size, self.context, self.card.base_dir)
        rich_text.set_position(*anchor)
        bounds = rich_text.get_local_bounds()
        rich_text.set_origin(
            round_half_away(bounds.width * element.origin[0]),
            round_half_away(bounds.height * element.origin[1]),
        )
        logger.debug(f"Text element at {anchor}, origin {rich_text.origin}, bounds {bounds}")
        rich_text.draw(canvas)

    def _draw_image(self, canvas: Image.Image, element: Element, content: ImageContent, anchor: Vector2) -> None:
        texture = ImageProcessor.load_texture(content.path, self.card.base_dir)
        width, height = self.card.size
        sprite = Sprite(texture)
        sprite.set_position(*anchor)
        sprite.set_scale(
            content.size[0] * width / texture.width,
            content.size[1] * height / texture.height,
        )
        # Origin is in texture pixels, before scaling
        sprite.set_origin(
            round_half_away(texture.width * element.origin[0]),
            round_half_away(texture.height * element.origin[1]),
        )
        logger.debug(f"Image element {content.path} at {anchor}, scale {sprite.scale}, origin {sprite.origin}")
        sprite.draw(canvas)


def _vector(value: Any, name: str, default: Vector2) -> Vector2:
    if value is None:
        return default
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise DocumentError(f"'{name}' must be a list of two numbers.")
    try:
        return (float(value[0]), float(value[1]))
    except (TypeError, ValueError):
        raise DocumentError(f"'{name}' must be a list of two numbers.") from None


def _parse_text(data: Any, default_character_size: int) -> TextContent:
    if not isinstance(data, dict) or "markup" not in data:
        raise DocumentError("Text element is missing required field 'markup'.")
    if "font" in data:
        logger.warning("Ignoring element-level 'font'; use a [font <path>] tag in the markup")
    size = data.get("size", default_character_size)
    if isinstance(size, float) and size.is_integer():
        size = int(size)
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise DocumentError(f"Text 'size' must be a non-negative integer, got {size!r}.")
    return TextContent(markup=str(data["markup"]), character_size=size)


def _parse_image(data: Any) -> ImageContent:
    if not isinstance(data, dict) or "path" not in data:
        raise DocumentError("Image element is missing required field 'path'.")
    return ImageContent(
        path=str(data["path"]),
        size=_vector(data.get("size"), "image.size", DEFAULT_IMAGE_SIZE),
    )


def parse_card_document(
    data: Dict[str, Any],
    base_dir: Optional[Path] = None,
    default_character_size: int = DEFAULT_CHARACTER_SIZE,
) -> CardSpec:
    """
    Build a CardSpec from a decoded card document.

    Args:
        data: Decoded JSON object
        base_dir: Directory relative font and image paths resolve against
        default_character_size: Text size used when a text element has no 'size'

    Raises:
        DocumentError: If the document does not have the expected shape
    """
    if not isinstance(data, dict):
        raise DocumentError("Card document must be a JSON object.")
    if "size" not in data:
        raise DocumentError("Card is missing required field 'size'.")
    size = data["size"]
    if (not isinstance(size, (list, tuple)) or len(size) < 2
            or not all(isinstance(v, int) and not isinstance(v, bool) and v > 0 for v in size[:2])):
        raise DocumentError(f"Card 'size' must be two positive integers, got {size!r}.")

    raw_elements = data.get("elements") or []
    if not isinstance(raw_elements, list):
        raise DocumentError("Card 'elements' must be a list.")

    elements: List[Element] = []
    for index, raw in enumerate(raw_elements):
        if not isinstance(raw, dict):
            raise DocumentError(f"Element {index} must be a JSON object.")
        has_text, has_image = "text" in raw, "image" in raw
        if has_text and has_image:
            raise DocumentError(f"Element {index} has both 'text' and 'image'.")
        if not (has_text or has_image):
            raise DocumentError(f"Element {index} needs either 'text' or 'image'.")

        content: Content
        if has_image:
            content = _parse_image(raw["image"])
        else:
            content = _parse_text(raw["text"], default_character_size)

        elements.append(Element(
            content=content,
            position=_vector(raw.get("pos"), "pos", DEFAULT_POSITION),
            origin=_vector(raw.get("origin"), "origin", DEFAULT_ORIGIN),
        ))

    return CardSpec(size=(size[0], size[1]), elements=tuple(elements), base_dir=base_dir)


def load_card_json(path: Path, default_character_size: int = DEFAULT_CHARACTER_SIZE) -> CardSpec:
    """
    Load a card document from a JSON file.

    Raises:
        OSError: If the file cannot be read
        DocumentError: If the file is not valid JSON or has the wrong shape
    """
    path = Path(path)
    logger.info(f"Loading card from {path}")

    raw = path.read_bytes()
    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DocumentError(f"Card file {path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON in {path}: {e}") from e

    card = parse_card_document(data, base_dir=path.parent, default_character_size=default_character_size)
    logger.info(f"Card loaded: {card.size[0]}x{card.size[1]} with {len(card.elements)} elements")
    return card
