"""Assign data groups and color types to sets of grid cells.

These functions never record history; the caller snapshots once per user
action (see ``SelectionEngine`` and ``HistoryManager.execute``).
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from .model import NO_COLOR_TYPE, NO_DATA_GROUP, Document, Key

logger = logging.getLogger("pixel_grid")


def _selected(doc: Document, keys: Iterable[Key], only_color_group: Optional[int]):
    for key in set(keys):
        pixel = doc.pixels.get(key)
        if pixel is None:
            continue
        if only_color_group is not None and only_color_group >= 0:
            if pixel.color_group != only_color_group:
                continue
        yield pixel


def assign_to_data_group(
    doc: Document,
    keys: Iterable[Key],
    group_id: int,
    only_color_group: Optional[int] = None,
) -> int:
    """Set ``data_group`` on pixels whose key is in ``keys``.

    Unknown group ids are coerced to 0 (none).

    Returns:
        Number of pixels touched.
    """
    if group_id not in doc.data_group_ids():
        logger.debug(f"Data group {group_id} does not exist, assigning none")
        group_id = NO_DATA_GROUP
    count = 0
    for pixel in _selected(doc, keys, only_color_group):
        pixel.data_group = group_id
        count += 1
    return count


def assign_to_color_type(
    doc: Document,
    keys: Iterable[Key],
    type_id: int,
    only_color_group: Optional[int] = None,
) -> int:
    """Set ``color_type`` on pixels whose key is in ``keys``.

    Unknown type ids are coerced to 0 (none).

    Returns:
        Number of pixels touched.
    """
    if type_id not in doc.color_type_ids():
        logger.debug(f"Color type {type_id} does not exist, assigning none")
        type_id = NO_COLOR_TYPE
    count = 0
    for pixel in _selected(doc, keys, only_color_group):
        pixel.color_type = type_id
        count += 1
    return count
