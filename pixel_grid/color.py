"""Color conversion utilities."""
from __future__ import annotations

import re
from typing import Sequence, Tuple, Union

import numpy as np

from .config import PixelGridError

RGB = Tuple[int, int, int]
ColorLike = Union[str, Sequence[int]]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def hex_to_rgb(value: str) -> RGB:
    """Parse '#rrggbb' or 'rrggbb' into an RGB tuple.

    Raises:
        PixelGridError: If the string is not a 6-digit hex color.
    """
    match = _HEX_RE.match(value.strip())
    if not match:
        raise PixelGridError(f"Invalid hex color: '{value}'")
    return (
        int(match.group(1), 16),
        int(match.group(2), 16),
        int(match.group(3), 16),
    )


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format RGB values as '#rrggbb', clamping each channel to [0, 255]."""
    def clamp(v: int) -> int:
        return max(0, min(255, int(round(v))))

    return f"#{clamp(r):02x}{clamp(g):02x}{clamp(b):02x}"


def normalize_hex(value: str) -> str:
    return rgb_to_hex(*hex_to_rgb(value))


def to_rgb(color: ColorLike) -> RGB:
    """Accept a hex string or an (r, g, b) sequence."""
    if isinstance(color, str):
        return hex_to_rgb(color)
    if len(color) < 3:
        raise PixelGridError(f"Invalid RGB color: {color!r}")
    r, g, b = (int(c) for c in color[:3])
    for channel in (r, g, b):
        if not 0 <= channel <= 255:
            raise PixelGridError(f"RGB channel out of range: {color!r}")
    return (r, g, b)


def color_distance(c1: RGB, c2: RGB) -> int:
    """Squared Euclidean distance in RGB space."""
    dr = c1[0] - c2[0]
    dg = c1[1] - c2[1]
    db = c1[2] - c2[2]
    return dr * dr + dg * dg + db * db


def nearest_palette_index(rgb: np.ndarray, palette: Sequence[str]) -> np.ndarray:
    """Find the index of the nearest palette color for each RGB row.

    Args:
        rgb: Array of shape (N, 3) with RGB values.
        palette: Hex palette colors.

    Returns:
        Array of shape (N,) with palette indices, or -1 everywhere when the
        palette is empty. Ties resolve to the earliest palette entry.
    """
    if len(palette) == 0:
        return np.full(rgb.shape[0], -1, dtype=np.int64)
    targets = np.array([hex_to_rgb(c) for c in palette], dtype=np.int64)
    diff = rgb.astype(np.int64)[:, None, :] - targets[None, :, :]
    dists = np.sum(diff * diff, axis=2)
    return np.argmin(dists, axis=1)
