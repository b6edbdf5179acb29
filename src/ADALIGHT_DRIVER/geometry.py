# src/ADALIGHT_DRIVER/geometry.py
"""
Device geometry: how a logical LED index maps onto a 2-D sample coordinate.

A strip is described by its canvas size and an index->coordinate function.
Device variants differ only in geometry and default LED count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

Coordinate = Tuple[int, int]
CoordinateMapper = Callable[[int, int], Coordinate]

# canvas height of the vertical strip, fixed regardless of LED count
VERTICAL_STRIP_ROWS = 120


def vertical_strip_position(led_index: int, led_count: int) -> Coordinate:
    """1 px wide x 120 tall; LEDs spread linearly over the rows."""
    # integer floor of i/n*rows, exact where float division would drift
    return 0, (led_index * VERTICAL_STRIP_ROWS) // led_count


def horizontal_strip_reversed_position(led_index: int, led_count: int) -> Coordinate:
    """led_count px wide x 1 tall; LED 0 is the rightmost column."""
    return led_count - 1 - led_index, 0


@dataclass(frozen=True)
class Geometry:
    # None means "equal to the configured LED count"
    width: Optional[int]
    height: Optional[int]
    map_index: CoordinateMapper

    def size(self, led_count: int) -> Coordinate:
        width = led_count if self.width is None else self.width
        height = led_count if self.height is None else self.height
        return width, height

    def position(self, led_index: int, led_count: int) -> Coordinate:
        return self.map_index(led_index, led_count)


@dataclass(frozen=True)
class DeviceVariant:
    name: str
    geometry: Geometry
    default_led_count: int


VERTICAL_STRIP = DeviceVariant(
    name="vertical",
    geometry=Geometry(width=1, height=VERTICAL_STRIP_ROWS, map_index=vertical_strip_position),
    default_led_count=120,
)

HORIZONTAL_STRIP_REVERSED = DeviceVariant(
    name="horizontal-reversed",
    geometry=Geometry(width=None, height=1, map_index=horizontal_strip_reversed_position),
    default_led_count=60,
)

VARIANTS = {variant.name: variant for variant in (VERTICAL_STRIP, HORIZONTAL_STRIP_REVERSED)}


def get_variant(name: str) -> DeviceVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise KeyError(f"unknown device variant {name!r} (known: {', '.join(sorted(VARIANTS))})") from None
