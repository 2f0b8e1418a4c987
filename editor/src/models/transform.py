"""Geometry value types for layer coordinates and extents."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y pair on a layer:
    - position in the parent's coordinate space
    - anchor point in unit space (0-1, 0.5 is center)
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))

    def offset(self, dx: float, dy: float) -> 'Vec2':
        return Vec2(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Size:
    """Width/height extent of a layer's bounds."""
    w: float
    h: float

    def __iter__(self):
        return iter((self.w, self.h))

    @property
    def center(self) -> Vec2:
        """Center of the bounds in the layer's own coordinate space"""
        return Vec2(self.w / 2, self.h / 2)
