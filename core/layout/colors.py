"""
Named color registry used by the markup parser.

Colors are looked up by name first; anything else is read as a hexadecimal
ARGB integer whose alpha byte is always forced opaque. Unparseable values fall
back to opaque white without raising.
"""

import logging
from typing import Dict, Union

from core.constants import BUILTIN_COLORS
from .models import Color, WHITE

logger = logging.getLogger(__name__)


class ColorRegistry:
    """Mapping from color name to Color, pre-populated with the built-in names."""

    def __init__(self, include_builtins: bool = True):
        self._colors: Dict[str, Color] = {}
        if include_builtins:
            for name, argb in BUILTIN_COLORS.items():
                self._colors[name] = Color.from_argb(argb)

    def add_color(self, name: str, color: Union[Color, int]) -> None:
        """
        Insert or overwrite a named color.

        Args:
            name: Name used in markup, e.g. ``[fill-color gold]``
            color: A Color, or a 32-bit ARGB integer (alpha forced opaque)
        """
        if isinstance(color, int):
            color = Color.from_argb(color)
        self._colors[name] = color
        logger.debug(f"Registered color {name!r} = {color}")

    def resolve(self, text: str) -> Color:
        """Resolve a color name or hexadecimal literal to a Color."""
        if text in self._colors:
            return self._colors[text]
        try:
            value = int(text, 16)
        except ValueError:
            logger.warning(f"Could not parse color {text!r}, using white")
            return WHITE
        if not 0 <= value <= 0xFFFFFFFF:
            logger.warning(f"Color {text!r} is out of range, using white")
            return WHITE
        return Color.from_argb(value)

    def __contains__(self, name: str) -> bool:
        return name in self._colors

    def __len__(self) -> int:
        return len(self._colors)
