"""
Image handling for the card layout module.

Loads image files into RGBA textures, draws scaled sprites, and composites
transformed RGBA layers onto the card canvas.
"""

import logging
from pathlib import Path
from typing import Optional
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ResourceError
from .models import FloatRect, round_half_away
from .transform import Transform, Transformable

logger = logging.getLogger(__name__)


def composite_layer(canvas: Image.Image, layer: Image.Image, transform: Transform) -> None:
    """
    Alpha-composite an RGBA layer onto the canvas.

    Args:
        canvas: RGBA destination image, modified in place
        layer: RGBA source image
        transform: Maps layer pixel coordinates to canvas pixel coordinates
    """
    if layer.width == 0 or layer.height == 0:
        return

    if transform.is_translation():
        ox, oy = transform.offset()
        dx, dy = round_half_away(ox), round_half_away(oy)
        if dx >= canvas.width or dy >= canvas.height:
            return
        if dx + layer.width <= 0 or dy + layer.height <= 0:
            return
        # alpha_composite rejects negative destinations; crop the layer instead
        canvas.alpha_composite(
            layer,
            dest=(max(dx, 0), max(dy, 0)),
            source=(max(-dx, 0), max(-dy, 0)),
        )
        return

    warped = layer.transform(
        canvas.size,
        Image.Transform.AFFINE,
        data=transform.inverse().affine_coefficients(),
        resample=Image.Resampling.BILINEAR,
    )
    canvas.alpha_composite(warped)


class ImageProcessor:
    """Loads image files as RGBA textures."""

    @staticmethod
    def resolve_path(image_path: str, base_dir: Optional[Path] = None) -> Path:
        """Resolve a relative image path against the card directory, then the working directory."""
        path = Path(image_path).expanduser()
        if not path.is_absolute() and base_dir is not None:
            candidate = Path(base_dir) / path
            if candidate.exists():
                return candidate
        return path

    @staticmethod
    def load_texture(image_path: str, base_dir: Optional[Path] = None) -> Image.Image:
        """
        Load an image file into an RGBA texture.

        Raises:
            ResourceError: If the file is missing or cannot be decoded
        """
        path = ImageProcessor.resolve_path(image_path, base_dir)
        try:
            with Image.open(path) as img:
                img.load()
                texture = img.convert("RGBA") if img.mode != "RGBA" else img.copy()
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.debug(f"Failed to load image {path}: {e}")
            raise ResourceError(f"Could not load image from \"{image_path}\".") from e

        logger.debug(f"Loaded texture: {path}, size: {texture.size}")
        return texture


class Sprite(Transformable):
    """A texture drawn with a transform."""

    def __init__(self, texture: Image.Image):
        super().__init__()
        self.texture = texture

    def get_local_bounds(self) -> FloatRect:
        return FloatRect(0.0, 0.0, float(self.texture.width), float(self.texture.height))

    def get_global_bounds(self) -> FloatRect:
        return self.get_transform().transform_rect(self.get_local_bounds())

    def draw(self, canvas: Image.Image) -> None:
        """Draw the sprite onto an RGBA canvas."""
        sx, sy = self.scale
        if sx == 0 or sy == 0:
            return

        if self.rotation != 0:
            composite_layer(canvas, self.texture, self.get_transform())
            return

        # Without rotation, resample once at the final size for better quality
        bounds = self.get_global_bounds()
        width = max(1, round_half_away(bounds.width))
        height = max(1, round_half_away(bounds.height))
        layer = self.texture
        if (width, height) != layer.size:
            layer = layer.resize((width, height), Image.Resampling.LANCZOS)
        if sx < 0:
            layer = ImageOps.mirror(layer)
        if sy < 0:
            layer = ImageOps.flip(layer)
        composite_layer(canvas, layer, Transform.translation(bounds.left, bounds.top))
