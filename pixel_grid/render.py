"""Projection of grid state to draw instructions, and a Pillow renderer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Tuple

from PIL import Image, ImageDraw

from .color import rgb_to_hex
from .model import Key, Pixel
from .selection import DragState

# Stroke styles, in draw order
STYLE_SELECTED = "selected"
STYLE_COLOR_GROUP = "color_group"
STYLE_COLOR_TYPE = "color_type"
STYLE_DATA_GROUP = "data_group"
STYLE_DRAG = "drag"

STYLE_COLORS = {
    STYLE_SELECTED: "#00ff00",
    STYLE_COLOR_GROUP: "#0000ff",
    STYLE_COLOR_TYPE: "#800080",
    STYLE_DATA_GROUP: "#ff0000",
    STYLE_DRAG: "#ffffff",
}

STROKE_WIDTH = 2
DASH_PATTERN = (5, 5)


@dataclass(frozen=True)
class DrawInstruction:
    """One rectangle for an external renderer.

    kind is 'fill', 'stroke' or 'dashed'. Coordinates are canvas pixels.
    """

    kind: str
    x: int
    y: int
    w: int
    h: int
    color: str
    style: Optional[str] = None


def _stroke(pixel: Pixel, cell_size: int, style: str) -> DrawInstruction:
    return DrawInstruction(
        kind="stroke",
        x=pixel.x * cell_size + 1,
        y=pixel.y * cell_size + 1,
        w=cell_size - 2,
        h=cell_size - 2,
        color=STYLE_COLORS[style],
        style=style,
    )


def project(
    pixels: Iterable[Pixel],
    size: int,
    cell_size: int,
    selection: AbstractSet[Key] = frozenset(),
    active_color_group: int = -1,
    active_color_type_id: int = 0,
    active_data_group_id: int = 0,
    drag: Optional[DragState] = None,
) -> List[DrawInstruction]:
    """Build the ordered draw list for the current grid state.

    Order: one fill per pixel; then outlines for selected pixels, pixels in
    the active color group, the active color type and the active data group;
    finally the dashed drag rectangle while dragging. Later instructions are
    drawn on top. Pixels are visited in row-major order.
    """
    if size == 0 or cell_size <= 0:
        return []

    ordered = sorted(pixels, key=lambda p: (p.y, p.x))
    out: List[DrawInstruction] = [
        DrawInstruction(
            kind="fill",
            x=p.x * cell_size,
            y=p.y * cell_size,
            w=cell_size,
            h=cell_size,
            color=rgb_to_hex(p.r, p.g, p.b),
        )
        for p in ordered
    ]

    out.extend(_stroke(p, cell_size, STYLE_SELECTED) for p in ordered if p.key in selection)
    if active_color_group >= 0:
        out.extend(
            _stroke(p, cell_size, STYLE_COLOR_GROUP)
            for p in ordered
            if p.color_group == active_color_group
        )
    if active_color_type_id > 0:
        out.extend(
            _stroke(p, cell_size, STYLE_COLOR_TYPE)
            for p in ordered
            if p.color_type == active_color_type_id
        )
    if active_data_group_id > 0:
        out.extend(
            _stroke(p, cell_size, STYLE_DATA_GROUP)
            for p in ordered
            if p.data_group == active_data_group_id
        )

    if drag is not None and drag.active and drag.start and drag.end:
        x0 = min(drag.start.x, drag.end.x) * cell_size
        y0 = min(drag.start.y, drag.end.y) * cell_size
        out.append(
            DrawInstruction(
                kind="dashed",
                x=x0,
                y=y0,
                w=abs(drag.end.x - drag.start.x) * cell_size + cell_size,
                h=abs(drag.end.y - drag.start.y) * cell_size + cell_size,
                color=STYLE_COLORS[STYLE_DRAG],
                style=STYLE_DRAG,
            )
        )
    return out


def _dashed_line(
    draw: ImageDraw.ImageDraw,
    start: Tuple[int, int],
    end: Tuple[int, int],
    color: str,
) -> None:
    on, off = DASH_PATTERN
    (x0, y0), (x1, y1) = start, end
    length = max(abs(x1 - x0), abs(y1 - y0))
    dx = (x1 - x0) / length if length else 0
    dy = (y1 - y0) / length if length else 0
    pos = 0
    while pos < length:
        seg = min(on, length - pos)
        draw.line(
            [(x0 + dx * pos, y0 + dy * pos), (x0 + dx * (pos + seg), y0 + dy * (pos + seg))],
            fill=color,
            width=STROKE_WIDTH,
        )
        pos += on + off


def rasterize(
    instructions: Iterable[DrawInstruction],
    width: int,
    height: int,
    background: Tuple[int, int, int, int] = (0, 0, 0, 0),
) -> Image.Image:
    """Render draw instructions onto a new RGBA image, in order."""
    img = Image.new("RGBA", (max(width, 1), max(height, 1)), background)
    draw = ImageDraw.Draw(img, "RGBA")
    for ins in instructions:
        if ins.w <= 0 or ins.h <= 0:
            continue
        x1 = ins.x + ins.w - 1
        y1 = ins.y + ins.h - 1
        if ins.kind == "fill":
            draw.rectangle([ins.x, ins.y, x1, y1], fill=ins.color)
        elif ins.kind == "stroke":
            draw.rectangle([ins.x, ins.y, x1, y1], outline=ins.color, width=STROKE_WIDTH)
        elif ins.kind == "dashed":
            corners = [(ins.x, ins.y), (x1, ins.y), (x1, y1), (ins.x, y1)]
            for i, corner in enumerate(corners):
                _dashed_line(draw, corner, corners[(i + 1) % 4], ins.color)
    return img
