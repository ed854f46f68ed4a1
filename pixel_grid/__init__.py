"""Pixel Grid - Turn images into classifiable pixel-art grids.

This package converts a raster image into a small square grid of colored
cells and provides the editing engine around it: rectangle selection,
paint and erase, data groups and color types, and snapshot undo.

Example:
    from pixel_grid import Editor

    editor = Editor()
    with open("input.png", "rb") as f:
        editor.load_image_bytes(f.read())

    editor.set_viewport(512, 512)
    editor.pointer_down(0, 0)
    editor.pointer_move(64, 32)
    editor.pointer_up()

    editor.export_image(cell_size=8).save("output.png")

For one-shot conversion, use process_image_bytes:

    from pixel_grid import Config, process_image_bytes

    output_bytes = process_image_bytes(input_bytes, Config(size=64))

For debug logging, enable with:

    import logging
    logging.getLogger("pixel_grid").setLevel(logging.DEBUG)
    logging.basicConfig(level=logging.DEBUG)
"""
import logging

# Package logger - disabled by default, enable with logging.getLogger("pixel_grid").setLevel(logging.DEBUG)
logger = logging.getLogger("pixel_grid")
logger.addHandler(logging.NullHandler())
from .cli import (
    ProcessingResult,
    main,
    process_image,
    process_image_bytes,
    process_image_bytes_with_grid,
)
from .config import (
    Config,
    DecodeFailure,
    EmptyHistory,
    ImportValidationError,
    InvalidFileType,
    InvariantViolation,
    PixelGridError,
)
from .convert import block_majority_convert, convert_raster, nearest_neighbor_convert
from .editor import Editor
from .history import Command, HistoryManager
from .model import ColorType, DataGroup, Document, Pixel, Position
from .raster import Raster, decode_image_bytes
from .render import DrawInstruction, project
from .selection import SelectionEngine, canvas_to_grid_coords, rect_keys

__all__ = [
    "Config",
    "PixelGridError",
    "InvalidFileType",
    "DecodeFailure",
    "EmptyHistory",
    "ImportValidationError",
    "InvariantViolation",
    "ProcessingResult",
    "main",
    "process_image",
    "process_image_bytes",
    "process_image_bytes_with_grid",
    # Engine
    "Editor",
    "Document",
    "Pixel",
    "Position",
    "DataGroup",
    "ColorType",
    "Raster",
    "decode_image_bytes",
    "block_majority_convert",
    "nearest_neighbor_convert",
    "convert_raster",
    "HistoryManager",
    "Command",
    "SelectionEngine",
    "canvas_to_grid_coords",
    "rect_keys",
    "DrawInstruction",
    "project",
]

__version__ = "1.0.0"
