"""Pytest fixtures for pixel_grid tests."""
from __future__ import annotations

import io
from typing import Tuple

import numpy as np
import pytest
from PIL import Image

from pixel_grid import Config, Document, Editor, Pixel, Raster
from pixel_grid.history import HistoryManager
from pixel_grid.model import DataGroup


@pytest.fixture
def default_config() -> Config:
    """Return a default Config instance."""
    return Config()


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a 64x64 test image with 8x8 pixel cells of rotating colors."""
    img = Image.new("RGBA", (64, 64), (255, 255, 255, 255))
    arr = np.array(img)

    cell_size = 8
    colors = [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 0, 255),  # Yellow
    ]

    for y in range(8):
        for x in range(8):
            color_idx = (x + y) % len(colors)
            y_start, y_end = y * cell_size, (y + 1) * cell_size
            x_start, x_end = x * cell_size, (x + 1) * cell_size
            arr[y_start:y_end, x_start:x_end] = colors[color_idx]

    return Image.fromarray(arr, "RGBA")


@pytest.fixture
def sample_image_bytes(sample_image: Image.Image) -> bytes:
    """Return sample image as PNG bytes."""
    buf = io.BytesIO()
    sample_image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def transparent_image() -> Image.Image:
    """Create a 32x32 image with only the center 16x16 opaque."""
    img = Image.new("RGBA", (32, 32), (0, 0, 0, 0))
    arr = np.array(img)
    arr[8:24, 8:24] = (255, 128, 64, 255)
    return Image.fromarray(arr, "RGBA")


@pytest.fixture
def small_grid_image() -> Image.Image:
    """Create a 4x4 image made of four 2x2 color blocks."""
    img = Image.new("RGBA", (4, 4), (255, 255, 255, 255))
    arr = np.array(img)

    arr[0:2, 0:2] = (255, 0, 0, 255)
    arr[0:2, 2:4] = (0, 255, 0, 255)
    arr[2:4, 0:2] = (0, 0, 255, 255)
    arr[2:4, 2:4] = (255, 255, 0, 255)

    return Image.fromarray(arr, "RGBA")


@pytest.fixture
def full_document() -> Document:
    """A 4x4 document with every cell populated in red and group 2 registered."""
    doc = Document(size=4)
    for y in range(4):
        for x in range(4):
            doc.pixels[(x, y)] = Pixel(x=x, y=y, r=255, g=0, b=0)
    doc.data_groups.append(DataGroup(id=2, name="Group 2"))
    return doc


@pytest.fixture
def history() -> HistoryManager:
    return HistoryManager()


@pytest.fixture
def editor(sample_image_bytes: bytes) -> Editor:
    """An editor with the sample image loaded into an 8x8 grid, 10px cells."""
    ed = Editor(Config(size=8))
    ed.load_image_bytes(sample_image_bytes)
    ed.history.clear()
    ed.set_viewport(80, 80)
    return ed


def create_raster(
    width: int, height: int, color: Tuple[int, int, int, int] = (255, 0, 0, 255)
) -> Raster:
    """Helper to create a uniform raster of specified size and color."""
    return Raster.from_image(Image.new("RGBA", (width, height), color))


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def truncated_png() -> bytes:
    """PNG bytes cut off in the middle of the image data."""
    rng = np.random.default_rng(0)
    arr = rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8)
    data = encode_png(Image.fromarray(arr, "RGBA"))
    return data[: len(data) // 2]
