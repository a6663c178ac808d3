"""Tests for image decoding and PNG encoding."""

import cv2
import numpy as np
import pytest

from bg_remover.exceptions import ImageLoadError, ImageSaveError
from bg_remover.processors import decode_image, encode_png, get_image_files, load_image, save_image
from bg_remover.raster import Color, Raster


def test_png_keeps_rgba_pixels():
    pixels = np.zeros((3, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0, 0)
    pixels[2, 1] = (0, 0, 255, 128)
    raster = Raster(pixels)

    decoded = decode_image(encode_png(raster))

    assert decoded.channels == 4
    assert (decoded.pixels == pixels).all()


def test_decode_uses_rgb_order(temp_dir):
    """OpenCV writes BGR; rasters come back as RGB."""
    bgr = np.zeros((2, 2, 3), dtype=np.uint8)
    bgr[:, :] = (255, 0, 0)
    path = temp_dir / "blue.png"
    cv2.imwrite(str(path), bgr)

    raster = load_image(path)

    assert raster.channels == 3
    assert raster.get_pixel(0, 0) == Color(0, 0, 255)


def test_decode_grayscale_expands_to_rgb(temp_dir):
    path = temp_dir / "gray.png"
    cv2.imwrite(str(path), np.full((2, 3), 90, dtype=np.uint8))

    raster = load_image(path)

    assert raster.channels == 3
    assert raster.get_pixel(2, 1) == Color(90, 90, 90)


def test_decode_garbage():
    with pytest.raises(ImageLoadError):
        decode_image(b"definitely not an image")
    with pytest.raises(ImageLoadError):
        decode_image(b"")


def test_load_missing_file(temp_dir):
    with pytest.raises(ImageLoadError) as exc_info:
        load_image(temp_dir / "missing.png")
    assert "missing.png" in str(exc_info.value)


def test_encode_empty_raster():
    with pytest.raises(ImageSaveError):
        encode_png(Raster(np.zeros((0, 3, 4), dtype=np.uint8)))


def test_save_creates_parent_dirs(temp_dir, gray_raster):
    target = temp_dir / "nested" / "out.png"

    assert save_image(gray_raster, target) == target
    assert load_image(target).get_pixel(0, 0) == Color(128, 128, 128)


def test_get_image_files(temp_dir):
    for name in ["a.png", "b.JPG", "notes.txt"]:
        (temp_dir / name).write_bytes(b"")

    names = [path.name for path in get_image_files(temp_dir)]

    assert names == ["a.png", "b.JPG"]
