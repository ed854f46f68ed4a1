"""Tests for raster module."""
from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from conftest import encode_png, truncated_png
from pixel_grid.config import DecodeFailure, InvalidFileType, PixelGridError
from pixel_grid.raster import Raster, decode_image_bytes


class TestRaster:
    """Tests for the Raster wrapper."""

    def test_from_image_converts_to_rgba(self) -> None:
        raster = Raster.from_image(Image.new("RGB", (3, 2), (1, 2, 3)))
        assert (raster.width, raster.height) == (3, 2)
        assert raster.get_pixel(2, 1) == (1, 2, 3, 255)

    def test_rejects_bad_shape(self) -> None:
        with pytest.raises(PixelGridError, match="shape"):
            Raster(np.zeros((4, 4, 3), dtype=np.uint8))


class TestDecodeImageBytes:
    """Tests for decode_image_bytes."""

    def test_decodes_png(self, sample_image: Image.Image, sample_image_bytes: bytes) -> None:
        raster = decode_image_bytes(sample_image_bytes)
        assert (raster.width, raster.height) == (64, 64)
        assert raster.get_pixel(0, 0) == (255, 0, 0, 255)
        assert raster.get_pixel(8, 0) == (0, 255, 0, 255)

    def test_palette_image_becomes_rgba(self) -> None:
        img = Image.new("P", (2, 2))
        img.putpalette([0, 0, 255] * 256)
        raster = decode_image_bytes(encode_png(img))
        assert raster.array.shape == (2, 2, 4)
        assert raster.get_pixel(0, 0) == (0, 0, 255, 255)

    def test_empty_bytes(self) -> None:
        with pytest.raises(InvalidFileType):
            decode_image_bytes(b"")

    def test_not_an_image(self) -> None:
        """Non-image bytes are an invalid file type."""
        with pytest.raises(InvalidFileType, match="Invalid file type"):
            decode_image_bytes(b"%PDF-1.4 not an image")

    def test_truncated_png(self) -> None:
        """A recognised but truncated image fails to decode."""
        with pytest.raises(DecodeFailure, match="Failed to load image"):
            decode_image_bytes(truncated_png())
