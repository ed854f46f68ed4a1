"""Document persistence: snapshot dicts, JSON exchange format and PNG export."""
from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np
from PIL import Image

from .color import hex_to_rgb, normalize_hex, rgb_to_hex
from .config import ImportValidationError, PixelGridError
from .model import (
    NO_COLOR_GROUP,
    NO_COLOR_TYPE,
    NO_DATA_GROUP,
    ColorType,
    DataGroup,
    Document,
    Pixel,
    default_data_groups,
)

logger = logging.getLogger("pixel_grid")

SNAPSHOT_VERSION = 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require(cond: bool, message: str) -> None:
    if not cond:
        raise ImportValidationError(message)


def _coerce_references(doc: Document) -> None:
    group_ids = doc.data_group_ids()
    type_ids = doc.color_type_ids()
    for pixel in doc.pixels.values():
        if pixel.data_group not in group_ids:
            logger.debug(f"Unknown data group {pixel.data_group} at {pixel.key}, using none")
            pixel.data_group = NO_DATA_GROUP
        if pixel.color_type not in type_ids:
            logger.debug(f"Unknown color type {pixel.color_type} at {pixel.key}, using none")
            pixel.color_type = NO_COLOR_TYPE


def _index_pixels(pixels: List[Pixel], size: int) -> Dict:
    indexed = {}
    for i, pixel in enumerate(pixels):
        _require(
            0 <= pixel.x < size and 0 <= pixel.y < size,
            f"Pixel at index {i} ({pixel.x}, {pixel.y}) is outside the {size}x{size} grid",
        )
        _require(
            pixel.key not in indexed,
            f"Pixel at index {i} duplicates coordinate ({pixel.x}, {pixel.y})",
        )
        indexed[pixel.key] = pixel
    return indexed


def to_snapshot(doc: Document) -> Dict[str, Any]:
    """Serialize a document to its persisted snapshot form."""
    return {
        "version": SNAPSHOT_VERSION,
        "size": doc.size,
        "pixels": [
            {
                "x": p.x,
                "y": p.y,
                "r": p.r,
                "g": p.g,
                "b": p.b,
                "colorGroup": p.color_group,
                "colorType": p.color_type,
                "dataGroup": p.data_group,
            }
            for p in doc.sorted_pixels()
        ],
        "palette": list(doc.palette),
        "dataGroups": [{"id": g.id, "name": g.name} for g in doc.data_groups],
        "colorTypes": [
            {"id": t.id, "name": t.name, "color": t.color} for t in doc.color_types
        ],
    }


def _pixel_from_raw(raw: Any, idx: int) -> Pixel:
    _require(isinstance(raw, dict), f"Pixel at index {idx} must be an object")
    for name in ("x", "y", "r", "g", "b"):
        _require(_is_int(raw.get(name)), f"Pixel at index {idx} field '{name}' must be an integer")
    for name in ("r", "g", "b"):
        _require(0 <= raw[name] <= 255, f"Pixel at index {idx} field '{name}' out of range")
    color_group = raw.get("colorGroup", NO_COLOR_GROUP)
    color_type = raw.get("colorType", NO_COLOR_TYPE)
    data_group = raw.get("dataGroup", NO_DATA_GROUP)
    for name, value in (("colorGroup", color_group), ("colorType", color_type), ("dataGroup", data_group)):
        _require(_is_int(value), f"Pixel at index {idx} field '{name}' must be an integer")
    return Pixel(
        x=raw["x"],
        y=raw["y"],
        r=raw["r"],
        g=raw["g"],
        b=raw["b"],
        color_group=color_group,
        color_type=color_type,
        data_group=data_group,
    )


def _registry_entries(data: Dict[str, Any], field: str) -> List[Dict[str, Any]]:
    entries = data.get(field, [])
    _require(isinstance(entries, list), f"Snapshot '{field}' must be a list")
    seen = set()
    for i, entry in enumerate(entries):
        _require(
            isinstance(entry, dict) and _is_int(entry.get("id")),
            f"Invalid registry entry: {field}[{i}] must have an integer id",
        )
        _require(
            entry["id"] not in seen,
            f"Invalid registry entry: {field}[{i}] duplicates id {entry['id']}",
        )
        seen.add(entry["id"])
    return entries


def _registries_from_raw(data: Dict[str, Any]) -> Tuple[List[DataGroup], List[ColorType]]:
    groups = [
        DataGroup(id=g["id"], name=str(g.get("name", f"Group {g['id']}")))
        for g in _registry_entries(data, "dataGroups")
    ]
    types = [
        ColorType(
            id=t["id"],
            name=str(t.get("name", f"Color {t['id']}")),
            color=str(t.get("color", "#000000")),
        )
        for t in _registry_entries(data, "colorTypes")
    ]
    return groups, types


def from_snapshot(data: Any) -> Document:
    """Build a document from its persisted snapshot form.

    Raises:
        ImportValidationError: On malformed data, out-of-bounds or duplicate
            coordinates. Unknown group/type references are coerced to none.
    """
    _require(isinstance(data, dict), "Snapshot must be an object")
    size = data.get("size")
    _require(_is_int(size) and size >= 0, "Snapshot 'size' must be a non-negative integer")
    raw_pixels = data.get("pixels", [])
    _require(isinstance(raw_pixels, list), "Snapshot 'pixels' must be a list")

    raw_palette = data.get("palette", [])
    _require(isinstance(raw_palette, list), "Snapshot 'palette' must be a list")
    try:
        palette = [normalize_hex(c) for c in raw_palette]
    except (PixelGridError, AttributeError) as exc:
        raise ImportValidationError(f"Invalid palette: {exc}") from exc

    groups, types = _registries_from_raw(data)
    if not any(g.id == NO_DATA_GROUP for g in groups):
        groups = default_data_groups() + groups

    pixels = [_pixel_from_raw(raw, i) for i, raw in enumerate(raw_pixels)]
    doc = Document(
        size=size,
        pixels=_index_pixels(pixels, size),
        palette=palette,
        data_groups=groups,
        color_types=types,
    )
    _coerce_references(doc)
    return doc


def export_json(doc: Document) -> Dict[str, Any]:
    """Serialize to the Palette / Artwork exchange format."""
    return {
        "Palette": [normalize_hex(c)[1:] for c in doc.palette],
        "Artwork": {
            "Width": doc.size,
            "Height": doc.size,
            "PixelData": [
                {
                    "Position": {"x": p.x, "y": p.y},
                    "Group": p.data_group,
                    "ColorGroup": p.color_group,
                    "ColorType": p.color_type,
                    "ColorHex": rgb_to_hex(p.r, p.g, p.b)[1:],
                }
                for p in doc.sorted_pixels()
            ],
        },
    }


def _validate_exchange(data: Any) -> None:
    _require(isinstance(data, dict), "Import data must be an object")
    palette = data.get("Palette")
    _require(isinstance(palette, list), 'Missing or invalid "Palette" field')
    for i, color in enumerate(palette):
        _require(isinstance(color, str), f"Palette color at index {i} must be a string")

    artwork = data.get("Artwork")
    _require(isinstance(artwork, dict), 'Missing or invalid "Artwork" field')
    width = artwork.get("Width")
    height = artwork.get("Height")
    _require(_is_int(width) and width > 0, "Artwork.Width must be a positive integer")
    _require(_is_int(height) and height > 0, "Artwork.Height must be a positive integer")
    _require(width == height, "Artwork must be square")
    _require(isinstance(artwork.get("PixelData"), list), "Artwork.PixelData must be an array")

    for i, p in enumerate(artwork["PixelData"]):
        _require(isinstance(p, dict), f"Pixel at index {i} must be an object")
        pos = p.get("Position")
        _require(
            isinstance(pos, dict) and _is_int(pos.get("x")) and _is_int(pos.get("y")),
            f"Pixel at index {i} Position must have integer x and y",
        )
        for name in ("Group", "ColorGroup", "ColorType"):
            _require(_is_int(p.get(name)), f"Pixel at index {i} {name} must be an integer")
        _require(isinstance(p.get("ColorHex"), str), f"Pixel at index {i} ColorHex must be a string")


def import_json(data: Any) -> Document:
    """Build a document from the Palette / Artwork exchange format.

    The exchange format carries no registries, so data groups and color
    types are rebuilt from the ids the pixels reference.

    Raises:
        ImportValidationError: If the payload is malformed or has
            out-of-bounds or duplicate coordinates.
    """
    _validate_exchange(data)
    try:
        palette = [normalize_hex(c) for c in data["Palette"]]
        pixels = []
        for p in data["Artwork"]["PixelData"]:
            r, g, b = hex_to_rgb(p["ColorHex"])
            pixels.append(
                Pixel(
                    x=p["Position"]["x"],
                    y=p["Position"]["y"],
                    r=r,
                    g=g,
                    b=b,
                    color_group=p["ColorGroup"],
                    color_type=p["ColorType"],
                    data_group=p["Group"],
                )
            )
    except PixelGridError as exc:
        raise ImportValidationError(str(exc)) from exc

    size = data["Artwork"]["Width"]
    indexed = _index_pixels(pixels, size)

    group_ids = sorted({p.data_group for p in pixels if p.data_group > NO_DATA_GROUP})
    groups = default_data_groups() + [DataGroup(id=i, name=f"Group {i}") for i in group_ids]

    type_colors: Dict[int, str] = {}
    for p in sorted(pixels, key=lambda p: (p.y, p.x)):
        if p.color_type > NO_COLOR_TYPE:
            type_colors.setdefault(p.color_type, rgb_to_hex(p.r, p.g, p.b))
    types = [
        ColorType(id=i, name=f"Color {i}", color=type_colors[i])
        for i in sorted(type_colors)
    ]

    doc = Document(
        size=size, pixels=indexed, palette=palette, data_groups=groups, color_types=types
    )
    _coerce_references(doc)
    return doc


def export_image(doc: Document, cell_size: int = 1) -> Image.Image:
    """Render the grid as an RGBA image, one cell_size block per cell.

    Empty cells are fully transparent.
    """
    if cell_size <= 0:
        raise PixelGridError("cell_size must be positive")
    side = max(doc.size, 1)
    arr = np.zeros((side, side, 4), dtype=np.uint8)
    for p in doc.pixels.values():
        arr[p.y, p.x] = (p.r, p.g, p.b, 255)
    img = Image.fromarray(arr, "RGBA")
    if cell_size > 1:
        img = img.resize((side * cell_size, side * cell_size), resample=Image.NEAREST)
    return img


def export_png_bytes(doc: Document, cell_size: int = 1) -> bytes:
    buf = io.BytesIO()
    export_image(doc, cell_size).save(buf, format="PNG")
    return buf.getvalue()


def save_document(path: str, doc: Document) -> None:
    Path(path).write_text(json.dumps(to_snapshot(doc), indent=2), encoding="utf-8")


def load_document(path: str) -> Document:
    """Load a document saved by save_document or exported by export_json."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ImportValidationError(f"Failed to parse JSON: {exc}") from exc
    if isinstance(raw, dict) and "Artwork" in raw:
        return import_json(raw)
    return from_snapshot(raw)
