#!/usr/bin/env python3
"""
Tests for card documents and the card compositor.
"""

import json
import logging

import pytest
from PIL import Image

from conftest import TEST_FONT
from core.layout import (
    CardRenderer, CardSpec, DocumentError, Element, ImageContent, ResourceError,
    RichText, TextContent, load_card_json, match_content, parse_card_document,
)
from core.layout.models import round_half_away

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


def test_parse_defaults():
    card = parse_card_document({
        "size": [200, 100],
        "elements": [
            {"text": {"markup": "hi", "size": 12}},
            {"image": {"path": "a.png"}, "pos": [0.5, 0.25], "origin": [1, 1]},
        ],
    })
    assert card.size == (200, 100)
    text, image = card.elements
    assert text.position == (0.0, 0.0) and text.origin == (0.0, 0.0)
    assert text.content == TextContent("hi", 12)
    assert image.content == ImageContent("a.png", (1.0, 1.0))
    assert image.position == (0.5, 0.25) and image.origin == (1.0, 1.0)


def test_parse_legacy_font_is_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        card = parse_card_document({
            "size": [10, 10],
            "elements": [{"text": {"markup": "x", "font": "old.ttf", "size": 9}}],
        })
    assert card.elements[0].content == TextContent("x", 9)
    assert "Ignoring element-level 'font'" in caplog.text


def test_parse_default_character_size():
    card = parse_card_document(
        {"size": [10, 10], "elements": [{"text": {"markup": "x"}}]},
        default_character_size=42,
    )
    assert card.elements[0].content.character_size == 42


def test_parse_integral_float_size():
    card = parse_card_document({"size": [10, 10], "elements": [{"text": {"markup": "x", "size": 12.0}}]})
    assert card.elements[0].content.character_size == 12
    assert isinstance(card.elements[0].content.character_size, int)


def test_parse_missing_elements_is_empty():
    assert parse_card_document({"size": [1, 1]}).elements == ()


@pytest.mark.parametrize("document, message", [
    ({}, "missing required field 'size'"),
    ({"size": [10]}, "'size' must be two positive integers"),
    ({"size": [10, 0]}, "'size' must be two positive integers"),
    ({"size": [10, 10], "elements": [{"text": {"markup": "a"}, "image": {"path": "b"}}]},
     "both 'text' and 'image'"),
    ({"size": [10, 10], "elements": [{"pos": [0, 0]}]}, "either 'text' or 'image'"),
    ({"size": [10, 10], "elements": [{"text": {"size": 3}}]}, "'markup'"),
    ({"size": [10, 10], "elements": [{"image": {}}]}, "'path'"),
    ({"size": [10, 10], "elements": [{"image": {"path": "a"}, "pos": [1]}]}, "'pos'"),
    ({"size": [10, 10], "elements": [{"text": {"markup": "a", "size": -1}}]}, "non-negative"),
    ({"size": [10, 10], "elements": [{"text": {"markup": "a", "size": 12.5}}]}, "non-negative"),
])
def test_parse_errors(document, message):
    with pytest.raises(DocumentError, match=message):
        parse_card_document(document)


def test_match_content_dispatch():
    text = TextContent("a", 1)
    image = ImageContent("b")
    assert match_content(text, lambda t: "text:" + t.markup, lambda i: "image") == "text:a"
    assert match_content(image, lambda t: "text", lambda i: "image:" + i.path) == "image:b"


def test_load_card_json(tmp_path):
    path = tmp_path / "card.json"
    path.write_text(json.dumps({"size": [64, 32], "elements": []}), encoding="utf-8")
    card = load_card_json(path)
    assert card.size == (64, 32)
    assert card.base_dir == tmp_path


def test_load_card_json_invalid(tmp_path):
    path = tmp_path / "card.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(DocumentError, match="Invalid JSON"):
        load_card_json(path)


def test_load_card_json_not_utf8(tmp_path):
    path = tmp_path / "card.json"
    path.write_bytes(b'{"size": [4, 4], "name": "\xff"}')
    with pytest.raises(DocumentError, match="not valid UTF-8"):
        load_card_json(path)


def test_empty_card_is_transparent():
    canvas = CardRenderer(CardSpec(size=(8, 4))).render_image()
    assert canvas.size == (8, 4)
    assert canvas.mode == "RGBA"
    assert canvas.getchannel("A").getbbox() is None


def test_text_is_centered_on_anchor(context):
    markup = f"[font {TEST_FONT}]Center"
    card = CardSpec(size=(100, 100), elements=(
        Element(TextContent(markup, 20), position=(0.5, 0.5), origin=(0.5, 0.5)),
    ))
    canvas = CardRenderer(card, context).render_image()

    bounds = RichText(markup, 20, context).get_local_bounds()
    left = 50 - round_half_away(bounds.width * 0.5)
    top = 50 - round_half_away(bounds.height * 0.5)
    assert left + bounds.width / 2 == pytest.approx(50, abs=1)
    assert top + bounds.height / 2 == pytest.approx(50, abs=1)

    ink_left, ink_top, ink_right, ink_bottom = canvas.getchannel("A").getbbox()
    assert ink_left >= left - 1 and ink_top >= top - 1
    assert ink_right <= left + bounds.width + 1
    assert ink_bottom <= top + bounds.height + 1


def test_image_is_scaled_relative_to_canvas(make_image):
    path = make_image("red.png", (10, 10), RED)
    card = CardSpec(size=(100, 50), elements=(
        Element(ImageContent(str(path), (0.5, 0.5)), position=(0.5, 0.5), origin=(0.5, 0.5)),
    ))
    canvas = CardRenderer(card).render_image()
    # Covers x 25..75 and y 12.5..37.5
    assert canvas.getpixel((50, 25)) == RED
    assert canvas.getpixel((26, 14)) == RED
    assert canvas.getpixel((74, 36)) == RED
    assert canvas.getpixel((10, 10)) == CLEAR
    assert canvas.getpixel((80, 25)) == CLEAR
    assert canvas.getpixel((50, 45)) == CLEAR


def test_image_origin_uses_texture_pixels(make_image):
    path = make_image("red.png", (4, 4), RED)
    card = CardSpec(size=(40, 40), elements=(
        Element(ImageContent(str(path), (0.25, 0.25)), position=(1, 1), origin=(1, 1)),
    ))
    canvas = CardRenderer(card).render_image()
    # Bottom-right anchored: occupies the last 10x10 pixels
    assert canvas.getpixel((39, 39)) == RED
    assert canvas.getpixel((30, 30)) == RED
    assert canvas.getpixel((29, 29)) == CLEAR


def test_later_elements_paint_over_earlier(make_image):
    red = make_image("red.png", (2, 2), RED)
    blue = make_image("blue.png", (2, 2), BLUE)
    card = CardSpec(size=(20, 20), elements=(
        Element(ImageContent(str(red))),
        Element(ImageContent(str(blue), (0.5, 0.5)), position=(0.5, 0.5)),
    ))
    canvas = CardRenderer(card).render_image()
    assert canvas.getpixel((5, 5)) == RED
    assert canvas.getpixel((15, 15)) == BLUE


def test_relative_image_path_uses_base_dir(make_image, tmp_path):
    make_image("red.png", (2, 2), RED)
    card = CardSpec(size=(4, 4), elements=(Element(ImageContent("red.png")),), base_dir=tmp_path)
    assert CardRenderer(card).render_image().getpixel((0, 0)) == RED


def test_render_writes_png(make_image, tmp_path):
    path = make_image("red.png", (2, 2), RED)
    out = tmp_path / "out" / "card.png"
    card = CardSpec(size=(30, 20), elements=(Element(ImageContent(str(path))),))
    assert CardRenderer(card).render(out) is True
    with Image.open(out) as img:
        assert img.size == (30, 20)
        assert img.convert("RGBA").getpixel((0, 0)) == RED


def test_render_jpeg_drops_alpha(make_image, tmp_path):
    path = make_image("red.png", (2, 2), RED)
    out = tmp_path / "card.jpg"
    card = CardSpec(size=(8, 8), elements=(Element(ImageContent(str(path))),))
    assert CardRenderer(card).render(out) is True
    assert out.exists()


def test_render_returns_false_when_save_fails(tmp_path):
    blocker = tmp_path / "file.txt"
    blocker.write_text("x")
    assert CardRenderer(CardSpec(size=(4, 4))).render(blocker / "card.png") is False
    assert CardRenderer(CardSpec(size=(4, 4))).render(tmp_path / "card.unknown") is False


def test_missing_image_aborts_without_output(tmp_path):
    out = tmp_path / "card.png"
    card = CardSpec(size=(4, 4), elements=(Element(ImageContent(str(tmp_path / "nope.png"))),))
    with pytest.raises(ResourceError, match="Could not load image"):
        CardRenderer(card).render(out)
    assert not out.exists()


def test_markup_error_aborts_render(context, tmp_path):
    out = tmp_path / "card.png"
    card = CardSpec(size=(4, 4), elements=(Element(TextContent("[font x.ttf", 10)),))
    with pytest.raises(Exception, match="Missing ']' in tag"):
        CardRenderer(card, context).render(out)
    assert not out.exists()
