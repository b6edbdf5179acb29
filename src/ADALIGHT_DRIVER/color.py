# src/ADALIGHT_DRIVER/color.py
"""
Color sources sampled by the render pipeline.

A color source answers sample(x, y) with a Color whose channels are
normalized floats in [0.0, 1.0]. The codec truncates them to bytes.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol, Tuple

from PIL import Image, ImageOps

RGB8 = Tuple[int, int, int]


def _normalized(value8: int) -> float:
    level = value8 / 255.0
    # v / 255 * 255 can land a hair below v; nudge up so truncation gives v back
    while int(level * 255) < value8:
        level = math.nextafter(level, 1.0)
    return level


# 8-bit channel -> normalized level, exact under to_rgb8 truncation
_LUT = tuple(_normalized(value8) for value8 in range(256))


class Color(NamedTuple):
    r: float
    g: float
    b: float

    @classmethod
    def from_rgb8(cls, r8: int, g8: int, b8: int) -> "Color":
        return cls(_LUT[r8], _LUT[g8], _LUT[b8])

    def to_rgb8(self) -> RGB8:
        """Truncate toward zero, no rounding: floor(c * 255) per channel."""
        return int(self.r * 255), int(self.g * 255), int(self.b * 255)


BLACK = Color(0.0, 0.0, 0.0)


class ColorSource(Protocol):
    def sample(self, x: int, y: int) -> Color: ...


class SolidColorSource:
    def __init__(self, color: Color):
        self.color = color

    def sample(self, x: int, y: int) -> Color:
        return self.color


# ---------- PixelCanvas ----------
class PixelCanvas:
    """
    Host-side 2-D RGB buffer.

    Stores 8-bit channels row-major; sample() hands them back normalized.
    Coordinates outside the canvas sample as black.
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"canvas must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = [(0, 0, 0)] * (width * height)

    def _offset(self, x: int, y: int) -> int:
        return y * self.width + x

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_rgb8(self, x: int, y: int, r8: int, g8: int, b8: int) -> None:
        if not self.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} canvas")
        self.pixels[self._offset(x, y)] = (
            max(0, min(255, int(r8))),
            max(0, min(255, int(g8))),
            max(0, min(255, int(b8))),
        )

    def get_rgb8(self, x: int, y: int) -> RGB8:
        return self.pixels[self._offset(x, y)]

    def fill(self, r8: int, g8: int, b8: int) -> None:
        for y in range(self.height):
            for x in range(self.width):
                self.set_rgb8(x, y, r8, g8, b8)

    def clear(self) -> None:
        self.pixels = [(0, 0, 0)] * (self.width * self.height)

    def sample(self, x: int, y: int) -> Color:
        if not self.contains(x, y):
            return BLACK
        return Color.from_rgb8(*self.get_rgb8(x, y))


# ---------- Images ----------
def load_image_rgb(image_path, width: int, height: int, background: RGB8 = (0, 0, 0)):
    """
    Works for PNG/JPEG/etc. Handles EXIF orientation and alpha,
    stretches to width x height and returns list[(R,G,B)] row-major.
    """
    im = Image.open(image_path)
    im = ImageOps.exif_transpose(im)  # fix camera rotation
    im = im.convert("RGBA")           # unify (alpha-friendly)
    im = im.resize((width, height), Image.BILINEAR)

    rgb = Image.new("RGB", im.size, background)
    rgb.paste(im, mask=im.split()[-1])  # alpha composite
    return list(rgb.getdata())


class ImageColorSource(PixelCanvas):
    """A still image scaled onto the device canvas."""

    def __init__(self, image_path, width: int, height: int, background: RGB8 = (0, 0, 0)):
        super().__init__(width, height)
        self.image_path = image_path
        self.pixels = [tuple(px) for px in load_image_rgb(image_path, width, height, background)]
