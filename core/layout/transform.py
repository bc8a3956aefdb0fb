"""
2D affine transforms for placing rich text and sprites on the canvas.

Coordinates are in pixels with y pointing down. A Transformable combines an
origin, scale, rotation and position the same way for every drawable:
``translate(position) @ rotate(rotation) @ scale(scale) @ translate(-origin)``.
"""

import math
from typing import Tuple

import numpy as np

from .models import FloatRect, Vector2


class Transform:
    """A 3x3 affine matrix."""

    def __init__(self, matrix=None):
        self.matrix = np.identity(3) if matrix is None else np.asarray(matrix, dtype=float)

    @classmethod
    def translation(cls, dx: float, dy: float) -> "Transform":
        return cls([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]])

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "Transform":
        return cls([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])

    @classmethod
    def rotation(cls, degrees: float) -> "Transform":
        """Clockwise rotation on screen (y down)."""
        radians = math.radians(degrees)
        c, s = math.cos(radians), math.sin(radians)
        return cls([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])

    def combine(self, other: "Transform") -> "Transform":
        """Transform that applies other first, then self."""
        return Transform(self.matrix @ other.matrix)

    def __matmul__(self, other: "Transform") -> "Transform":
        return self.combine(other)

    def inverse(self) -> "Transform":
        return Transform(np.linalg.inv(self.matrix))

    def transform_point(self, x: float, y: float) -> Vector2:
        px, py, _ = self.matrix @ np.array([x, y, 1.0])
        return (float(px), float(py))

    def transform_rect(self, rect: FloatRect) -> FloatRect:
        """Axis-aligned bounding box of a transformed rectangle."""
        corners = np.array([
            [rect.left, rect.top, 1.0],
            [rect.right, rect.top, 1.0],
            [rect.left, rect.bottom, 1.0],
            [rect.right, rect.bottom, 1.0],
        ]).T
        points = self.matrix @ corners
        left, top = points[0].min(), points[1].min()
        right, bottom = points[0].max(), points[1].max()
        return FloatRect(float(left), float(top), float(right - left), float(bottom - top))

    def is_translation(self) -> bool:
        return bool(np.allclose(self.matrix[:2, :2], np.identity(2)))

    def offset(self) -> Vector2:
        return (float(self.matrix[0, 2]), float(self.matrix[1, 2]))

    def affine_coefficients(self) -> Tuple[float, float, float, float, float, float]:
        """The (a, b, c, d, e, f) row-major coefficients Pillow's AFFINE transform expects."""
        m = self.matrix
        return (
            float(m[0, 0]), float(m[0, 1]), float(m[0, 2]),
            float(m[1, 0]), float(m[1, 1]), float(m[1, 2]),
        )

    def __eq__(self, other) -> bool:
        return isinstance(other, Transform) and bool(np.allclose(self.matrix, other.matrix))

    def __repr__(self) -> str:
        return f"Transform({self.matrix[:2].tolist()})"


class Transformable:
    """Position, origin, scale and rotation of a drawable."""

    def __init__(self):
        self.position: Vector2 = (0.0, 0.0)
        self.origin: Vector2 = (0.0, 0.0)
        self.scale: Vector2 = (1.0, 1.0)
        self.rotation: float = 0.0  # degrees, clockwise

    def set_position(self, x: float, y: float) -> None:
        self.position = (float(x), float(y))

    def set_origin(self, x: float, y: float) -> None:
        self.origin = (float(x), float(y))

    def set_scale(self, sx: float, sy: float) -> None:
        self.scale = (float(sx), float(sy))

    def set_rotation(self, degrees: float) -> None:
        self.rotation = float(degrees) % 360.0

    def get_transform(self) -> Transform:
        return (
            Transform.translation(*self.position)
            @ Transform.rotation(self.rotation)
            @ Transform.scaling(*self.scale)
            @ Transform.translation(-self.origin[0], -self.origin[1])
        )
