"""Configuration, validation and the exception hierarchy for pixel grid."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

DEFAULT_GRID_SIZE = 32
MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 256

# Pixels with alpha below this value are treated as transparent
ALPHA_CUTOFF = 10

MAX_UNDO_STACK_SIZE = 50

SCALE_MODES = ("majority", "nearest")
EDIT_MODES = ("group", "colorType", "paint", "erase")

DEFAULT_PALETTE: List[str] = [
    "#FF0000",  # Red
    "#00FF00",  # Green
    "#0000FF",  # Blue
    "#FFFF00",  # Yellow
    "#FF00FF",  # Magenta
    "#00FFFF",  # Cyan
    "#FFFFFF",  # White
    "#000000",  # Black
    "#808080",  # Gray
]


class PixelGridError(Exception):
    """Base exception for pixel grid errors."""

    pass


class InvalidFileType(PixelGridError):
    """Raised when acquired bytes are not a recognised image."""

    pass


class DecodeFailure(PixelGridError):
    """Raised when image data is corrupt or unreadable."""

    pass


class EmptyHistory(PixelGridError):
    """Raised by undo when there is nothing to restore."""

    pass


class ImportValidationError(PixelGridError):
    """Raised when an imported document is malformed."""

    pass


class InvariantViolation(PixelGridError):
    """Raised when the engine produced a duplicate or out-of-bounds cell."""

    pass


@dataclass
class Config:
    """Configuration for the image-to-grid pipeline."""

    input_path: str = ""
    output_path: str = ""
    size: int = DEFAULT_GRID_SIZE
    scale_mode: str = "majority"
    alpha_cutoff: int = ALPHA_CUTOFF
    cell_size: int = 1
    palette: Optional[List[str]] = None
    json_path: Optional[str] = None
    max_undo: Optional[int] = MAX_UNDO_STACK_SIZE
    preview: bool = False
    timing: bool = False

    def palette_or_default(self) -> List[str]:
        return list(self.palette) if self.palette else list(DEFAULT_PALETTE)


def validate_image_dimensions(width: int, height: int) -> None:
    """Validate decoded image dimensions are within acceptable bounds.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        DecodeFailure: If dimensions are invalid.
    """
    if width == 0 or height == 0:
        raise DecodeFailure("Image dimensions cannot be zero")
    if width > 10000 or height > 10000:
        raise DecodeFailure("Image dimensions too large (max 10000x10000)")


def clamp_grid_size(size: int) -> int:
    """Clamp a user-requested grid size to the supported range."""
    return max(MIN_GRID_SIZE, min(MAX_GRID_SIZE, int(size)))


def validate_scale_mode(mode: str) -> str:
    """Return the scale mode, or raise PixelGridError if unknown."""
    if mode not in SCALE_MODES:
        raise PixelGridError(
            f"Unknown scale mode '{mode}' (expected 'majority' or 'nearest')"
        )
    return mode
