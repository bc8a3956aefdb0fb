#!/usr/bin/env python3
"""
Tests for affine transforms and transformable objects.
"""

import pytest
from PIL import Image

from conftest import TEST_FONT
from core.layout import FloatRect, RichText, Sprite, Transform, Transformable, composite_layer

FONT = f"[font {TEST_FONT}]"
RED = (255, 0, 0, 255)


def test_translation_and_scaling():
    t = Transform.translation(10, 5) @ Transform.scaling(2, 3)
    assert t.transform_point(1, 1) == pytest.approx((12, 8))


def test_rotation_is_clockwise_on_screen():
    t = Transform.rotation(90)
    assert t.transform_point(1, 0) == pytest.approx((0, 1))


def test_transform_rect_is_axis_aligned_box():
    rect = FloatRect(0, 0, 10, 20)
    bounds = Transform.rotation(90).transform_rect(rect)
    assert bounds.left == pytest.approx(-20)
    assert bounds.top == pytest.approx(0)
    assert bounds.width == pytest.approx(20)
    assert bounds.height == pytest.approx(10)


def test_inverse():
    t = Transform.translation(3, 4) @ Transform.rotation(30) @ Transform.scaling(2, 2)
    x, y = t.inverse().transform_point(*t.transform_point(7, -2))
    assert (x, y) == pytest.approx((7, -2))


def test_transformable_origin_maps_to_position():
    obj = Transformable()
    obj.set_position(50, 60)
    obj.set_origin(5, 10)
    obj.set_scale(3, 0.5)
    obj.set_rotation(45)
    assert obj.get_transform().transform_point(5, 10) == pytest.approx((50, 60))


def test_is_translation():
    assert Transform.translation(2.5, 1).is_translation()
    assert not Transform.scaling(2, 1).is_translation()
    assert Transform.translation(2.5, 1).offset() == (2.5, 1.0)


def test_affine_coefficients_row_major():
    t = Transform.translation(7, 9)
    assert t.affine_coefficients() == (1.0, 0.0, 7.0, 0.0, 1.0, 9.0)


def test_rotated_sprite_is_drawn_in_its_global_bounds():
    canvas = Image.new("RGBA", (60, 60), (0, 0, 0, 0))
    sprite = Sprite(Image.new("RGBA", (10, 4), RED))
    sprite.set_position(20, 20)
    sprite.set_scale(2, 2)
    sprite.set_rotation(90)
    sprite.draw(canvas)

    bounds = sprite.get_global_bounds()
    assert (bounds.left, bounds.top, bounds.right, bounds.bottom) == pytest.approx((12, 20, 20, 40))
    assert canvas.getchannel("A").getbbox() == (12, 20, 20, 40)
    assert canvas.getpixel((16, 30)) == RED


def test_composite_layer_warps_non_translations():
    canvas = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
    layer = Image.new("RGBA", (5, 5), RED)
    composite_layer(canvas, layer, Transform.translation(10, 10) @ Transform.scaling(3, 2))
    assert canvas.getchannel("A").getbbox() == (10, 10, 25, 20)
    assert canvas.getpixel((17, 15)) == RED


def test_scaled_rich_text_is_drawn_larger(context):
    plain_canvas = Image.new("RGBA", (200, 200), (0, 0, 0, 0))
    RichText(FONT + "HHH", 20, context).draw(plain_canvas)
    plain = plain_canvas.getchannel("A").getbbox()

    canvas = Image.new("RGBA", (200, 200), (0, 0, 0, 0))
    text = RichText(FONT + "HHH", 20, context)
    text.set_position(10, 10)
    text.set_scale(2, 2)
    text.draw(canvas)
    left, top, right, bottom = canvas.getchannel("A").getbbox()

    bounds = text.get_global_bounds()
    assert left >= bounds.left - 1 and top >= bounds.top - 1
    assert right <= bounds.right + 1 and bottom <= bounds.bottom + 1
    assert right - left > 1.5 * (plain[2] - plain[0])
    assert bottom - top > 1.5 * (plain[3] - plain[1])


def test_rotated_rich_text_stands_upright(context):
    canvas = Image.new("RGBA", (200, 200), (0, 0, 0, 0))
    text = RichText(FONT + "HHHHH", 20, context)
    text.set_position(100, 20)
    text.set_rotation(90)
    text.draw(canvas)
    left, top, right, bottom = canvas.getchannel("A").getbbox()

    bounds = text.get_global_bounds()
    assert left >= bounds.left - 1 and top >= bounds.top - 1
    assert right <= bounds.right + 1 and bottom <= bounds.bottom + 1
    assert right <= 101
    assert bottom - top > right - left
