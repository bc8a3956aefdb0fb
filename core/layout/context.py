"""Render context owning the color registry and font cache used by rich text."""

from pathlib import Path
from typing import List, Optional

from .colors import ColorRegistry
from .font_manager import FontManager


class RenderContext:
    """
    Shared state for markup parsing and rendering.

    Colors and fonts registered on a context are visible to every rich text
    built with it. Neither cache evicts entries. A context is not safe to share
    between threads.
    """

    def __init__(
        self,
        colors: Optional[ColorRegistry] = None,
        fonts: Optional[FontManager] = None,
        font_dirs: Optional[List[Path]] = None,
    ):
        self.colors = colors if colors is not None else ColorRegistry()
        self.fonts = fonts if fonts is not None else FontManager(font_dirs)


_default_context: Optional[RenderContext] = None


def default_context() -> RenderContext:
    """Get the process-wide context used when none is passed explicitly."""
    global _default_context
    if _default_context is None:
        _default_context = RenderContext()
    return _default_context


def add_color(name: str, color) -> None:
    """Register a named color on the process-wide context."""
    default_context().colors.add_color(name, color)
