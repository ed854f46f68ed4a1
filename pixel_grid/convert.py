"""Raster-to-grid conversion using nearest-neighbor or block-majority sampling."""
from __future__ import annotations

import logging
import time
from typing import List, Tuple

import numpy as np

from .config import ALPHA_CUTOFF, PixelGridError, validate_scale_mode
from .model import Pixel, check_invariants
from .raster import Raster

logger = logging.getLogger("pixel_grid")


def _check_size(size: int) -> None:
    if size < 0:
        raise PixelGridError(f"Grid size must be non-negative, got {size}")


def _block_bounds(index: int, extent: int, size: int) -> Tuple[int, int]:
    """Source span [start, end) of block ``index`` along one axis.

    Boundaries are floored; a block that would be empty (raster smaller than
    the grid) is widened to the single source pixel it starts on.
    """
    start = index * extent // size
    end = (index + 1) * extent // size
    if end <= start:
        start = min(start, extent - 1)
        end = start + 1
    return start, end


def _pack_rgb(flat: np.ndarray) -> np.ndarray:
    flat = flat.astype(np.uint32)
    return (flat[:, 0] << 16) | (flat[:, 1] << 8) | flat[:, 2]


def nearest_neighbor_convert(
    raster: Raster, size: int, alpha_cutoff: int = ALPHA_CUTOFF
) -> List[Pixel]:
    """Convert a raster to grid pixels by sampling one source pixel per cell.

    Cell (gx, gy) samples source pixel
    (floor(gx * width / size), floor(gy * height / size)).

    Args:
        raster: Decoded RGBA raster.
        size: Grid side length.
        alpha_cutoff: Cells whose sample alpha is below this are left empty.

    Returns:
        Pixels in row-major order, with default classification fields.

    Raises:
        PixelGridError: If size is negative.
    """
    _check_size(size)
    if size == 0 or raster.width == 0 or raster.height == 0:
        return []

    t0 = time.perf_counter()
    arr = raster.array
    width, height = raster.width, raster.height

    xs = np.arange(size, dtype=np.int64) * width // size
    ys = np.arange(size, dtype=np.int64) * height // size
    sampled = arr[ys[:, None], xs[None, :]]

    pixels: List[Pixel] = []
    for gy in range(size):
        for gx in range(size):
            r, g, b, a = sampled[gy, gx]
            if a < alpha_cutoff:
                continue
            pixels.append(Pixel(x=gx, y=gy, r=int(r), g=int(g), b=int(b)))

    check_invariants(pixels, size)
    logger.debug(
        f"Nearest-neighbor {width}x{height} -> {size}x{size}: "
        f"{len(pixels)} cells in {time.perf_counter() - t0:.4f}s"
    )
    return pixels


def block_majority_convert(
    raster: Raster, size: int, alpha_cutoff: int = ALPHA_CUTOFF
) -> List[Pixel]:
    """Convert a raster to grid pixels using majority-vote color selection.

    The raster is partitioned into size x size blocks. For each block, the
    most common opaque RGB value is selected. Ties are broken by the color
    encountered first in row-major scan order of the block. Fully
    transparent blocks are left empty.

    Args:
        raster: Decoded RGBA raster.
        size: Grid side length.
        alpha_cutoff: Source pixels with alpha below this are ignored.

    Returns:
        Pixels in row-major order, with default classification fields.

    Raises:
        PixelGridError: If size is negative.
    """
    _check_size(size)
    if size == 0 or raster.width == 0 or raster.height == 0:
        return []

    t0 = time.perf_counter()
    arr = raster.array
    width, height = raster.width, raster.height

    col_bounds = [_block_bounds(i, width, size) for i in range(size)]
    row_bounds = [_block_bounds(i, height, size) for i in range(size)]

    pixels: List[Pixel] = []
    for gy, (ys, ye) in enumerate(row_bounds):
        for gx, (xs, xe) in enumerate(col_bounds):
            flat = arr[ys:ye, xs:xe].reshape(-1, 4)
            opaque = flat[flat[:, 3] >= alpha_cutoff]
            if opaque.shape[0] == 0:
                continue

            packed = _pack_rgb(opaque)
            values, first_seen, counts = np.unique(
                packed, return_index=True, return_counts=True
            )
            # Among the most frequent colors, take the earliest in scan order
            winners = np.flatnonzero(counts == counts.max())
            best = winners[np.argmin(first_seen[winners])]
            value = int(values[best])

            pixels.append(
                Pixel(
                    x=gx,
                    y=gy,
                    r=(value >> 16) & 0xFF,
                    g=(value >> 8) & 0xFF,
                    b=value & 0xFF,
                )
            )

    check_invariants(pixels, size)
    logger.debug(
        f"Block-majority {width}x{height} -> {size}x{size}: "
        f"{len(pixels)} cells in {time.perf_counter() - t0:.4f}s"
    )
    return pixels


def convert_raster(
    raster: Raster,
    size: int,
    mode: str = "majority",
    alpha_cutoff: int = ALPHA_CUTOFF,
) -> List[Pixel]:
    """Convert with the algorithm named by ``mode`` ('majority' or 'nearest')."""
    validate_scale_mode(mode)
    if mode == "nearest":
        return nearest_neighbor_convert(raster, size, alpha_cutoff)
    return block_majority_convert(raster, size, alpha_cutoff)
