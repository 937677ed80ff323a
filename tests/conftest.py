"""Pytest configuration and fixtures."""

import io

import numpy as np
import pytest
from PIL import Image

from quiltvec.types import PixelBuffer

DARK_BLUE = (0, 0, 139, 255)
WHITE = (255, 255, 255, 255)


def rgba_canvas(width: int, height: int, color=(0, 0, 0, 0)) -> np.ndarray:
    """Create an (H, W, 4) uint8 canvas filled with one colour."""
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = color
    return canvas


def encode_png(array: np.ndarray) -> bytes:
    """Encode an RGBA array as PNG bytes."""
    stream = io.BytesIO()
    Image.fromarray(array).save(stream, format="PNG")
    return stream.getvalue()


@pytest.fixture
def solid_rect_array():
    """100x100 transparent canvas with a dark-blue 60x60 square at (20, 20)."""
    canvas = rgba_canvas(100, 100)
    canvas[20:80, 20:80] = DARK_BLUE
    return canvas


@pytest.fixture
def solid_rect_buffer(solid_rect_array):
    return PixelBuffer(data=solid_rect_array)


@pytest.fixture
def ring_buffer():
    """60x60 white canvas with a closed 2px dark outline around rows/cols 10-49."""
    canvas = rgba_canvas(60, 60, WHITE)
    canvas[10:50, 10:50] = DARK_BLUE
    canvas[12:48, 12:48] = WHITE
    return PixelBuffer(data=canvas)


@pytest.fixture
def transparent_buffer():
    """Fully transparent 50x50 canvas."""
    return PixelBuffer(data=rgba_canvas(50, 50))


@pytest.fixture
def white_buffer():
    """Opaque white 30x30 canvas with no ink."""
    return PixelBuffer(data=rgba_canvas(30, 30, WHITE))


@pytest.fixture
def single_pixel_buffer():
    """10x10 transparent canvas with one dark-blue pixel at (5, 5)."""
    canvas = rgba_canvas(10, 10)
    canvas[5, 5] = DARK_BLUE
    return PixelBuffer(data=canvas)


@pytest.fixture
def solid_rect_png(solid_rect_array):
    return encode_png(solid_rect_array)


@pytest.fixture
def solid_rect_file(tmp_path, solid_rect_png):
    path = tmp_path / "pattern.png"
    path.write_bytes(solid_rect_png)
    return path
