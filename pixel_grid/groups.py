"""Data group and color type registries."""
from __future__ import annotations

import logging
from typing import Dict

from .color import hex_to_rgb, rgb_to_hex
from .grid import color_groups
from .model import NO_COLOR_TYPE, NO_DATA_GROUP, ColorType, DataGroup, Document

logger = logging.getLogger("pixel_grid")


def add_data_group(doc: Document, name: str = "") -> DataGroup:
    """Append a data group with the next free id."""
    new_id = max((g.id for g in doc.data_groups), default=NO_DATA_GROUP) + 1
    group = DataGroup(id=new_id, name=name or f"Group {new_id}")
    doc.data_groups.append(group)
    return group


def rename_data_group(doc: Document, group_id: int, name: str) -> bool:
    for group in doc.data_groups:
        if group.id == group_id:
            group.name = name
            return True
    return False


def clear_data_group(doc: Document, group_id: int) -> int:
    """Move every pixel in ``group_id`` back to "None". Returns pixels moved."""
    if group_id == NO_DATA_GROUP:
        return 0
    moved = 0
    for pixel in doc.pixels.values():
        if pixel.data_group == group_id:
            pixel.data_group = NO_DATA_GROUP
            moved += 1
    return moved


def delete_data_group(doc: Document, group_id: int) -> bool:
    """Remove a data group and reassign its pixels to "None".

    The "None" group itself cannot be deleted.
    """
    if group_id == NO_DATA_GROUP:
        return False
    remaining = [g for g in doc.data_groups if g.id != group_id]
    if len(remaining) == len(doc.data_groups):
        return False
    clear_data_group(doc, group_id)
    doc.data_groups = remaining
    return True


def parse_color_types(doc: Document) -> Dict[int, int]:
    """Create one color type per non-empty palette color group.

    Color type ids start at 1 in color group order; every pixel is assigned
    the type of its color group, or none when ungrouped.

    Returns:
        Mapping from color group index to the new color type id.
    """
    mapping: Dict[int, int] = {}
    types = []
    for index in color_groups(doc):
        if index < 0 or index >= len(doc.palette):
            continue
        type_id = len(types) + 1
        mapping[index] = type_id
        types.append(
            ColorType(
                id=type_id,
                name=f"Color {type_id}",
                color=rgb_to_hex(*hex_to_rgb(doc.palette[index])),
            )
        )
    doc.color_types = types
    for pixel in doc.pixels.values():
        pixel.color_type = mapping.get(pixel.color_group, NO_COLOR_TYPE)
    logger.debug(f"Parsed {len(types)} color types from color groups")
    return mapping
