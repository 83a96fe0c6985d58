"""Image decoding tests using small synthetic images."""

import numpy as np
import pytest
from PIL import Image

import histogram
from histogram import histogram_from_image, histogram_from_pixels


def save_image(path, pixels):
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    return path


def test_histogram_from_pixels_counts_packed_colors():
    pixels = np.array([
        [[255, 0, 0], [255, 0, 0], [0, 0, 255]],
        [[0, 0, 255], [0, 0, 255], [18, 52, 86]],
    ], dtype=np.uint8)
    assert histogram_from_pixels(pixels) == {0xFF0000: 2, 0x0000FF: 3, 0x123456: 1}


def test_histogram_from_pixels_empty():
    assert histogram_from_pixels(np.zeros((0, 3), dtype=np.uint8)) == {}


def test_histogram_from_pixels_rejects_wrong_shape():
    with pytest.raises(ValueError):
        histogram_from_pixels(np.zeros((4, 4), dtype=np.uint8))


def test_histogram_from_image(tmp_path):
    pixels = np.zeros((4, 5, 3), dtype=np.uint8)
    pixels[:, :2] = (0, 255, 0)
    path = save_image(tmp_path / "green.png", pixels)

    result = histogram_from_image(str(path))
    assert result == {0x00FF00: 8, 0x000000: 12}
    assert sum(result.values()) == 20


def test_histogram_from_image_drops_alpha(tmp_path):
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[...] = (10, 20, 30, 0)
    path = save_image(tmp_path / "rgba.png", pixels)
    assert histogram_from_image(str(path)) == {0x0A141E: 4}


def test_missing_image(tmp_path):
    with pytest.raises(FileNotFoundError):
        histogram_from_image(str(tmp_path / "missing.png"))


def test_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image")
    with pytest.raises(ValueError):
        histogram_from_image(str(path))


def test_oversized_image(tmp_path, monkeypatch):
    path = save_image(tmp_path / "wide.png", np.zeros((2, 8, 3)))
    monkeypatch.setattr(histogram, "MAX_IMAGE_DIMENSION", 4)
    with pytest.raises(ValueError, match="exceed maximum"):
        histogram_from_image(str(path))


def test_too_many_pixels(tmp_path, monkeypatch):
    path = save_image(tmp_path / "big.png", np.zeros((6, 6, 3)))
    monkeypatch.setattr(histogram, "MAX_IMAGE_PIXELS", 20)
    with pytest.raises(ValueError, match="exceeding maximum"):
        histogram_from_image(str(path))
