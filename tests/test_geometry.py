import pytest

from ADALIGHT_DRIVER.geometry import (
    HORIZONTAL_STRIP_REVERSED,
    VERTICAL_STRIP,
    get_variant,
    horizontal_strip_reversed_position,
    vertical_strip_position,
)


def test_vertical_strip_is_identity_for_120_leds():
    assert [vertical_strip_position(i, 120) for i in range(120)] == [(0, i) for i in range(120)]


def test_vertical_strip_spreads_fewer_leds_over_all_rows():
    assert vertical_strip_position(0, 60) == (0, 0)
    assert vertical_strip_position(1, 60) == (0, 2)
    assert vertical_strip_position(59, 60) == (0, 118)
    assert vertical_strip_position(2, 7) == (0, 34)  # floor(2/7*120) = floor(34.28)


def test_horizontal_strip_is_reversed():
    assert horizontal_strip_reversed_position(0, 60) == (59, 0)
    assert horizontal_strip_reversed_position(59, 60) == (0, 0)


def test_geometry_size():
    assert VERTICAL_STRIP.geometry.size(37) == (1, 120)
    assert HORIZONTAL_STRIP_REVERSED.geometry.size(37) == (37, 1)


def test_variant_defaults():
    assert VERTICAL_STRIP.default_led_count == 120
    assert HORIZONTAL_STRIP_REVERSED.default_led_count == 60


def test_positions_stay_inside_canvas():
    for variant in (VERTICAL_STRIP, HORIZONTAL_STRIP_REVERSED):
        for led_count in (1, 7, 60, 120):
            width, height = variant.geometry.size(led_count)
            for led_index in range(led_count):
                x, y = variant.geometry.position(led_index, led_count)
                assert 0 <= x < width
                assert 0 <= y < height


def test_get_variant():
    assert get_variant("horizontal-reversed") is HORIZONTAL_STRIP_REVERSED
    with pytest.raises(KeyError, match="known: horizontal-reversed, vertical"):
        get_variant("ring")
