"""Editing session: one document with its history, selection and UI state."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from PIL import Image

from .color import ColorLike
from .config import (
    EDIT_MODES,
    Config,
    PixelGridError,
    clamp_grid_size,
    validate_scale_mode,
)
from .convert import convert_raster
from .grid import add_palette_color, erase, paint, regroup, set_pixels, update_palette_color
from .groups import add_data_group, clear_data_group, delete_data_group, parse_color_types, rename_data_group
from .history import Command, HistoryManager
from .model import NO_COLOR_GROUP, NO_COLOR_TYPE, NO_DATA_GROUP, DataGroup, Document
from .project_io import export_image, export_json, from_snapshot, import_json, to_snapshot
from .raster import Raster, decode_image_bytes
from .render import DrawInstruction, project
from .selection import EditState, SelectionEngine, cell_size_for

logger = logging.getLogger("pixel_grid")

MIN_ZOOM = 0.1
MAX_ZOOM = 2.0


class Editor:
    """Owns a single document and routes every user action through history.

    Each mutating action is a ``Command`` executed by the history manager,
    so exactly one undo entry is recorded per action.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()
        self.target_size = clamp_grid_size(self.config.size)
        self.scale_mode = validate_scale_mode(self.config.scale_mode)
        self.doc = Document(size=self.target_size, palette=self.config.palette_or_default())
        self.history = HistoryManager(self.config.max_undo)
        self.state = EditState()
        self.selection = SelectionEngine(self.doc, self.history, self.state)
        self.zoom = 1.0
        self._canvas = (0, 0)
        self._load_ticket = 0

    # ---- UI state ----

    def set_edit_mode(self, mode: str) -> None:
        if mode not in EDIT_MODES:
            raise PixelGridError(f"Unknown edit mode '{mode}'")
        self.state.edit_mode = mode
        self.selection.clear()

    def set_scale_mode(self, mode: str) -> None:
        self.scale_mode = validate_scale_mode(mode)

    def set_size(self, size: int) -> int:
        """Set the grid size used by the next conversion (clamped to 8..256)."""
        self.target_size = clamp_grid_size(size)
        return self.target_size

    def set_viewport(self, canvas_w: int, canvas_h: int, zoom: Optional[float] = None) -> int:
        """Fit the grid into a canvas; returns the resulting cell size."""
        if zoom is not None:
            self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))
        self._canvas = (canvas_w, canvas_h)
        return self._refit()

    def _refit(self) -> int:
        canvas_w, canvas_h = self._canvas
        if not canvas_w or not canvas_h:
            return int(self.selection.cell_size_px)
        self.selection.cell_size_px = cell_size_for(canvas_w, canvas_h, self.doc.size, self.zoom)
        return self.selection.cell_size_px

    def set_active_data_group(self, group_id: int) -> None:
        self.state.active_data_group_id = group_id

    def set_active_color_type(self, type_id: int) -> None:
        self.state.active_color_type_id = type_id
        self.set_edit_mode("colorType")

    def set_active_color_group(self, index: int) -> None:
        self.state.active_color_group = index

    # ---- image loading ----

    def begin_load(self) -> int:
        """Issue a ticket for a pending image load; newer tickets supersede older ones."""
        self._load_ticket += 1
        return self._load_ticket

    def finish_load(self, ticket: int, raster: Raster) -> bool:
        """Convert a decoded raster into the grid.

        Results for any ticket older than the most recently issued one are
        discarded without touching the document or history.

        Returns:
            True if the raster was applied.
        """
        if ticket != self._load_ticket:
            logger.debug(f"Discarding stale load {ticket} (latest {self._load_ticket})")
            return False

        size = self.target_size
        pixels = convert_raster(raster, size, self.scale_mode, self.config.alpha_cutoff)

        def apply(doc: Document) -> None:
            doc.size = size
            set_pixels(doc, pixels)
            regroup(doc)

        self.history.execute(self.doc, Command("load image", apply))
        self.selection.clear()
        self._refit()
        logger.debug(f"Loaded image into {size}x{size} grid ({len(pixels)} cells)")
        return True

    def load_image_bytes(self, data: bytes) -> bool:
        """Decode and convert image bytes.

        A ticket is issued only once decoding succeeds, so bytes that fail to
        decode never make a pending load stale.

        Raises:
            InvalidFileType, DecodeFailure: Before any document mutation.
        """
        raster = decode_image_bytes(data)
        return self.finish_load(self.begin_load(), raster)

    # ---- pointer input ----

    def pointer_down(self, px: float, py: float) -> bool:
        return self.selection.pointer_down(px, py)

    def pointer_move(self, px: float, py: float) -> None:
        self.selection.pointer_move(px, py)

    def pointer_up(self) -> List:
        return self.selection.pointer_up()

    def pointer_leave(self) -> List:
        return self.selection.pointer_leave()

    # ---- edit commands ----

    def _run(self, label: str, apply) -> Any:
        return self.history.execute(self.doc, Command(label, apply))

    def paint_selection(self, color: ColorLike) -> int:
        """Paint the retained selection and clear it."""
        keys = set(self.selection.selection)
        if not keys:
            return 0
        count = self._run(
            "paint",
            lambda doc: paint(doc, keys, color, only_color_group=self.state.active_color_group),
        )
        self.selection.clear()
        return count

    def erase_selection(self) -> int:
        """Erase the retained selection and clear it."""
        keys = set(self.selection.selection)
        if not keys:
            return 0
        count = self._run(
            "erase",
            lambda doc: erase(doc, keys, only_color_group=self.state.active_color_group),
        )
        self.selection.clear()
        return count

    def add_data_group(self, name: str = "") -> DataGroup:
        group = self._run("add data group", lambda doc: add_data_group(doc, name))
        self.state.active_data_group_id = group.id
        return group

    def rename_data_group(self, group_id: int, name: str) -> bool:
        return self._run("rename data group", lambda doc: rename_data_group(doc, group_id, name))

    def delete_active_data_group(self) -> bool:
        group_id = self.state.active_data_group_id
        if group_id == NO_DATA_GROUP:
            return False
        deleted = self._run("delete data group", lambda doc: delete_data_group(doc, group_id))
        self.state.active_data_group_id = NO_DATA_GROUP
        return deleted

    def clear_active_data_group(self) -> int:
        group_id = self.state.active_data_group_id
        if group_id == NO_DATA_GROUP:
            return 0
        return self._run("clear data group", lambda doc: clear_data_group(doc, group_id))

    def parse_color_types(self) -> Dict[int, int]:
        mapping = self._run("parse color types", parse_color_types)
        self.state.active_color_type_id = self.doc.color_types[0].id if self.doc.color_types else NO_COLOR_TYPE
        return mapping

    def add_palette_color(self, color: str) -> None:
        def apply(doc: Document) -> None:
            add_palette_color(doc, color)
            regroup(doc)

        self._run("add palette color", apply)

    def update_palette_color(self, index: int, color: str) -> bool:
        def apply(doc: Document) -> bool:
            changed = update_palette_color(doc, index, color)
            regroup(doc)
            return changed

        return self._run("update palette color", apply)

    def regroup(self) -> None:
        self._run("regroup", regroup)

    def undo(self) -> None:
        """Undo the last action.

        Raises:
            EmptyHistory: If there is nothing to undo.
        """
        self.history.undo(self.doc)
        # Size is not part of a snapshot; grow it if restored cells need room
        if self.doc.pixels:
            needed = max(max(x, y) for x, y in self.doc.pixels) + 1
            if needed > self.doc.size:
                self.doc.size = needed
        self.selection.clear()
        self._refit()

    # ---- import / export ----

    def import_document(self, data: Any) -> None:
        """Replace the document from exchange-format or snapshot data.

        Raises:
            ImportValidationError: If the data is invalid; nothing changes.
        """
        incoming = import_json(data) if isinstance(data, dict) and "Artwork" in data else from_snapshot(data)

        def apply(doc: Document) -> None:
            doc.size = incoming.size
            doc.pixels = incoming.pixels
            doc.palette = incoming.palette
            doc.data_groups = incoming.data_groups
            doc.color_types = incoming.color_types

        self._run("import", apply)
        self.selection.clear()
        self._refit()
        self.state.active_data_group_id = NO_DATA_GROUP
        self.state.active_color_type_id = NO_COLOR_TYPE
        self.state.active_color_group = NO_COLOR_GROUP

    def export_json(self) -> Dict[str, Any]:
        return export_json(self.doc)

    def snapshot(self) -> Dict[str, Any]:
        return to_snapshot(self.doc)

    def export_image(self, cell_size: Optional[int] = None) -> Image.Image:
        return export_image(self.doc, cell_size or self.config.cell_size)

    def draw_instructions(self) -> List[DrawInstruction]:
        return project(
            self.doc.pixels.values(),
            self.doc.size,
            int(self.selection.cell_size_px),
            selection=self.selection.selection,
            active_color_group=self.state.active_color_group,
            active_color_type_id=self.state.active_color_type_id,
            active_data_group_id=self.state.active_data_group_id,
            drag=self.selection.drag,
        )
