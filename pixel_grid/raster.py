"""Decoded raster input and image-byte decoding."""
from __future__ import annotations

import io
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .config import DecodeFailure, InvalidFileType, PixelGridError, validate_image_dimensions


class Raster:
    """A decoded RGBA raster.

    Wraps an (height, width, 4) uint8 array. The converters read the array
    directly; ``get_pixel`` is the per-pixel accessor used by callers that
    supply their own sampling.
    """

    def __init__(self, array: np.ndarray) -> None:
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise PixelGridError(
                f"Raster array must have shape (H, W, 4), got {arr.shape}"
            )
        self.array = arr.astype(np.uint8, copy=False)

    @classmethod
    def from_image(cls, img: Image.Image) -> "Raster":
        return cls(np.array(img.convert("RGBA"), dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.array.shape[1])

    @property
    def height(self) -> int:
        return int(self.array.shape[0])

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.array[y, x]
        return int(r), int(g), int(b), int(a)


def decode_image_bytes(data: bytes) -> Raster:
    """Decode image bytes into a Raster.

    Args:
        data: Encoded image bytes (PNG, JPEG, GIF, ...).

    Returns:
        Fully decoded RGBA raster.

    Raises:
        InvalidFileType: If the bytes are not a recognised image.
        DecodeFailure: If the image is recognised but cannot be decoded.
    """
    if not data:
        raise InvalidFileType("Invalid file type. Please upload an image file.")
    try:
        img = Image.open(io.BytesIO(data))
    except UnidentifiedImageError as exc:
        raise InvalidFileType(
            "Invalid file type. Please upload an image file."
        ) from exc

    try:
        # Force a full decode so truncated data fails here, not mid-conversion
        img.load()
        rgba = img.convert("RGBA")
    except (OSError, ValueError, SyntaxError) as exc:
        raise DecodeFailure(f"Failed to load image: {exc}") from exc

    width, height = rgba.size
    validate_image_dimensions(width, height)
    return Raster.from_image(rgba)
