"""Pixel grid mutation primitives and palette-derived color groups."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from .color import ColorLike, hex_to_rgb, nearest_palette_index, normalize_hex, to_rgb
from .model import NO_COLOR_GROUP, Document, Key, Pixel, check_invariants

logger = logging.getLogger("pixel_grid")


def set_pixels(doc: Document, pixels: Iterable[Pixel]) -> None:
    """Replace the document's pixels atomically.

    Raises:
        InvariantViolation: If any pixel is out of bounds or duplicated. The
            document is left unchanged in that case.
    """
    doc.pixels = check_invariants(pixels, doc.size)


def compute_color_groups(
    pixels: Iterable[Pixel], palette: Sequence[str]
) -> Dict[Key, int]:
    """Map each pixel key to the index of the palette entry equal to its RGB.

    The first matching entry wins when the palette repeats a color. Pixels
    matching no entry map to -1.
    """
    index_of: Dict[tuple, int] = {}
    for i, color in enumerate(palette):
        index_of.setdefault(hex_to_rgb(color), i)
    return {p.key: index_of.get(p.rgb, NO_COLOR_GROUP) for p in pixels}


def regroup(doc: Document) -> None:
    """Recompute every pixel's color group from the current palette."""
    groups = compute_color_groups(doc.pixels.values(), doc.palette)
    for key, group in groups.items():
        doc.pixels[key].color_group = group


def snap_to_palette(doc: Document) -> None:
    """Assign every pixel to its nearest palette color group by RGB distance."""
    pixels = list(doc.pixels.values())
    if not pixels:
        return
    rgb = np.array([p.rgb for p in pixels], dtype=np.int64)
    nearest = nearest_palette_index(rgb, doc.palette)
    for pixel, index in zip(pixels, nearest):
        pixel.color_group = int(index)


def color_groups(doc: Document) -> Dict[int, List[Key]]:
    """Keys per color group index (ungrouped pixels under -1), sorted by index."""
    result: Dict[int, List[Key]] = {}
    for pixel in doc.sorted_pixels():
        result.setdefault(pixel.color_group, []).append(pixel.key)
    return dict(sorted(result.items()))


def _targets(
    doc: Document, keys: Iterable[Key], only_color_group: Optional[int]
) -> List[Pixel]:
    targets = []
    for key in dict.fromkeys(keys):
        pixel = doc.pixels.get(key)
        if pixel is None:
            continue
        if only_color_group is not None and only_color_group >= 0:
            if pixel.color_group != only_color_group:
                continue
        targets.append(pixel)
    return targets


def paint(
    doc: Document,
    keys: Iterable[Key],
    color: ColorLike,
    only_color_group: Optional[int] = None,
) -> int:
    """Set the RGB of existing pixels whose key is in ``keys``.

    Keys without a pixel are skipped. When ``only_color_group`` is >= 0,
    only pixels in that color group are painted.

    Returns:
        Number of pixels painted.
    """
    r, g, b = to_rgb(color)
    targets = _targets(doc, keys, only_color_group)
    for pixel in targets:
        pixel.r, pixel.g, pixel.b = r, g, b
    return len(targets)


def erase(
    doc: Document,
    keys: Iterable[Key],
    only_color_group: Optional[int] = None,
) -> int:
    """Remove pixels whose key is in ``keys``; absent keys are skipped.

    Returns:
        Number of pixels removed.
    """
    targets = _targets(doc, keys, only_color_group)
    for pixel in targets:
        del doc.pixels[pixel.key]
    return len(targets)


def add_palette_color(doc: Document, color: str) -> None:
    doc.palette.append(normalize_hex(color))


def update_palette_color(doc: Document, index: int, color: str) -> bool:
    """Replace a palette entry; out-of-range indices are ignored."""
    if index < 0 or index >= len(doc.palette):
        logger.debug(f"Palette index {index} out of range, ignoring update")
        return False
    doc.palette[index] = normalize_hex(color)
    return True


def set_palette(doc: Document, palette: Sequence[str]) -> None:
    doc.palette = [normalize_hex(c) for c in palette]
