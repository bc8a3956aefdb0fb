"""Shared pytest fixtures for CardGen tests."""

import os
import sys

import pytest
from PIL import Image

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.layout import FontFace, RenderContext

TEST_FONT = "test-font.ttf"


@pytest.fixture
def context():
    """Render context with Pillow's bundled font registered as TEST_FONT."""
    ctx = RenderContext()
    ctx.fonts.register(TEST_FONT, FontFace.builtin(TEST_FONT))
    return ctx


@pytest.fixture
def make_image(tmp_path):
    """Write a solid-color PNG and return its path."""
    def _make(name, size, color):
        path = tmp_path / name
        Image.new("RGBA", size, color).save(path)
        return path
    return _make
