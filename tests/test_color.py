import pytest
from PIL import Image

from ADALIGHT_DRIVER.color import BLACK, Color, ImageColorSource, PixelCanvas, SolidColorSource


def test_to_rgb8_truncates():
    assert Color(1.0, 0.5, 0.0).to_rgb8() == (255, 127, 0)
    assert Color(0.004, 0.996, 0.9999).to_rgb8() == (1, 253, 254)


def test_from_rgb8_survives_truncation_for_every_level():
    for value in range(256):
        color = Color.from_rgb8(value, value, value)
        assert color.to_rgb8() == (value, value, value)
        assert 0.0 <= color.r <= 1.0


def test_solid_source_ignores_coordinates():
    source = SolidColorSource(Color(0.2, 0.4, 0.6))
    assert source.sample(0, 0) == source.sample(99, 7) == Color(0.2, 0.4, 0.6)


def test_canvas_set_and_sample():
    canvas = PixelCanvas(2, 3)
    canvas.set_rgb8(1, 2, 255, 0, 51)
    assert canvas.get_rgb8(1, 2) == (255, 0, 51)
    assert canvas.sample(1, 2).to_rgb8() == (255, 0, 51)
    assert canvas.sample(0, 0) == BLACK


def test_canvas_clamps_channels():
    canvas = PixelCanvas(1, 1)
    canvas.set_rgb8(0, 0, 300, -4, 12)
    assert canvas.get_rgb8(0, 0) == (255, 0, 12)


def test_canvas_outside_samples_black_and_rejects_writes():
    canvas = PixelCanvas(1, 1)
    canvas.fill(9, 9, 9)
    assert canvas.sample(1, 0) == BLACK
    assert canvas.sample(0, -1) == BLACK
    with pytest.raises(IndexError):
        canvas.set_rgb8(1, 0, 1, 1, 1)


def test_canvas_fill_and_clear():
    canvas = PixelCanvas(3, 2)
    canvas.fill(1, 2, 3)
    assert set(canvas.pixels) == {(1, 2, 3)}
    canvas.clear()
    assert set(canvas.pixels) == {(0, 0, 0)}


def test_canvas_rejects_empty_size():
    with pytest.raises(ValueError):
        PixelCanvas(0, 5)


def test_image_source_is_scaled_to_canvas(tmp_path):
    path = tmp_path / "red.png"
    Image.new("RGB", (8, 8), (255, 0, 0)).save(path)
    source = ImageColorSource(path, 1, 120)
    assert (source.width, source.height) == (1, 120)
    assert source.get_rgb8(0, 0) == (255, 0, 0)
    assert source.sample(0, 119) == Color(1.0, 0.0, 0.0)


def test_image_source_composites_alpha_over_background(tmp_path):
    path = tmp_path / "clear.png"
    Image.new("RGBA", (4, 1), (255, 255, 255, 0)).save(path)
    source = ImageColorSource(path, 4, 1, background=(0, 0, 10))
    assert source.get_rgb8(3, 0) == (0, 0, 10)
