"""Pointer-driven rectangle selection over the grid."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Set

from .assign import assign_to_color_type, assign_to_data_group
from .config import EDIT_MODES, PixelGridError
from .history import HistoryManager
from .model import NO_COLOR_GROUP, NO_COLOR_TYPE, NO_DATA_GROUP, Document, Key, Position

logger = logging.getLogger("pixel_grid")


@dataclass
class EditState:
    """UI-owned editing context read by the selection release effect."""

    edit_mode: str = "group"
    active_data_group_id: int = NO_DATA_GROUP
    active_color_type_id: int = NO_COLOR_TYPE
    # -1 means no color group filter
    active_color_group: int = NO_COLOR_GROUP


@dataclass
class DragState:
    active: bool = False
    start: Optional[Position] = None
    end: Optional[Position] = None


def canvas_to_grid_coords(
    px: float, py: float, cell_size_px: float, size: int
) -> Optional[Position]:
    """Map a canvas point to the grid cell under it, clamped to the grid.

    Returns:
        The cell position, or None when size or cell_size_px is zero.
    """
    if size == 0 or cell_size_px == 0:
        return None
    x = math.floor(px / cell_size_px)
    y = math.floor(py / cell_size_px)
    return Position(
        x=max(0, min(size - 1, x)),
        y=max(0, min(size - 1, y)),
    )


def cell_size_for(canvas_w: int, canvas_h: int, size: int, zoom: float = 1.0) -> int:
    """On-screen cell size for a grid fitted into a canvas at a zoom level."""
    if size == 0:
        return 0
    return int(math.floor(min(canvas_w, canvas_h) / size * zoom))


def rect_keys(a: Position, b: Position) -> List[Key]:
    """All keys in the inclusive rectangle spanned by two corners.

    The result does not depend on which corner is given first.
    """
    min_x, max_x = min(a.x, b.x), max(a.x, b.x)
    min_y, max_y = min(a.y, b.y), max(a.y, b.y)
    return [
        (x, y)
        for y in range(min_y, max_y + 1)
        for x in range(min_x, max_x + 1)
    ]


class SelectionEngine:
    """Drag state machine (Idle / Dragging) plus the retained selection.

    On release, exactly one history snapshot is taken, then the edit mode
    decides the effect: 'group' and 'colorType' assign immediately and clear
    the selection; 'paint' and 'erase' keep the selection for a later command.
    """

    def __init__(
        self,
        doc: Document,
        history: HistoryManager,
        state: Optional[EditState] = None,
        cell_size_px: float = 16,
    ) -> None:
        self.doc = doc
        self.history = history
        self.state = state if state is not None else EditState()
        self.cell_size_px = cell_size_px
        self.drag = DragState()
        self.selection: Set[Key] = set()

    @property
    def dragging(self) -> bool:
        return self.drag.active

    def canvas_extent(self) -> float:
        return self.doc.size * self.cell_size_px

    def _coords(self, px: float, py: float) -> Optional[Position]:
        return canvas_to_grid_coords(px, py, self.cell_size_px, self.doc.size)

    def pointer_down(self, px: float, py: float) -> bool:
        """Start a drag if the point is on the canvas and the grid has cells."""
        if self.drag.active or not self.doc.pixels:
            return False
        extent = self.canvas_extent()
        if px < 0 or py < 0 or px >= extent or py >= extent:
            return False
        coord = self._coords(px, py)
        if coord is None:
            return False
        self.drag = DragState(active=True, start=coord, end=coord)
        return True

    def pointer_move(self, px: float, py: float) -> None:
        if not self.drag.active:
            return
        coord = self._coords(px, py)
        if coord is not None:
            self.drag.end = coord

    def pointer_up(self) -> List[Key]:
        """Finish the drag and run the release effect.

        Returns:
            Keys inside the released rectangle (empty if not dragging).
        """
        if not self.drag.active or self.drag.start is None or self.drag.end is None:
            self.drag = DragState()
            return []

        keys = rect_keys(self.drag.start, self.drag.end)
        self.drag = DragState()
        if self.state.edit_mode not in EDIT_MODES:
            raise PixelGridError(f"Unknown edit mode '{self.state.edit_mode}'")
        self.history.save_state(self.doc)
        self._release(keys)
        return keys

    # Leaving the tracked area ends the drag like a release
    pointer_leave = pointer_up

    def _release(self, keys: List[Key]) -> None:
        mode = self.state.edit_mode
        if mode == "group":
            assign_to_data_group(
                self.doc, keys, self.state.active_data_group_id,
                only_color_group=self.state.active_color_group,
            )
            self.clear()
        elif mode == "colorType":
            assign_to_color_type(
                self.doc, keys, self.state.active_color_type_id,
                only_color_group=self.state.active_color_group,
            )
            self.clear()
        else:
            self.selection.update(keys)
        logger.debug(f"Released {len(keys)} cells in '{mode}' mode")

    def toggle(self, key: Key) -> None:
        if key in self.selection:
            self.selection.discard(key)
        else:
            self.selection.add(key)

    def clear(self) -> None:
        self.selection = set()
