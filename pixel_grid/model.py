"""Grid data model: pixels, classification registries and the document."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_GRID_SIZE, DEFAULT_PALETTE, InvariantViolation, PixelGridError

Key = Tuple[int, int]

NO_COLOR_GROUP = -1
NO_COLOR_TYPE = 0
NO_DATA_GROUP = 0


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    @property
    def key(self) -> Key:
        return (self.x, self.y)


@dataclass
class Pixel:
    """One occupied grid cell with its color and classification fields."""

    x: int
    y: int
    r: int
    g: int
    b: int
    color_group: int = NO_COLOR_GROUP
    color_type: int = NO_COLOR_TYPE
    data_group: int = NO_DATA_GROUP

    @property
    def key(self) -> Key:
        return (self.x, self.y)

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass
class DataGroup:
    id: int
    name: str


@dataclass
class ColorType:
    id: int
    name: str
    color: str = "#000000"


def default_data_groups() -> List[DataGroup]:
    return [DataGroup(id=NO_DATA_GROUP, name="None")]


def format_key(key: Key) -> str:
    return f"{key[0]},{key[1]}"


def parse_key(text: str) -> Key:
    """Parse an 'x,y' key string."""
    try:
        xs, ys = text.split(",")
        return (int(xs), int(ys))
    except ValueError as exc:
        raise PixelGridError(f"Invalid pixel key: '{text}'") from exc


def check_invariants(pixels: Iterable[Pixel], size: int) -> Dict[Key, Pixel]:
    """Index pixels by key, failing fast on bad coordinates.

    Args:
        pixels: Pixels to index.
        size: Grid side length.

    Returns:
        Dict mapping (x, y) to pixel.

    Raises:
        InvariantViolation: On an out-of-bounds or duplicate coordinate.
    """
    indexed: Dict[Key, Pixel] = {}
    for pixel in pixels:
        if not (0 <= pixel.x < size and 0 <= pixel.y < size):
            raise InvariantViolation(
                f"Pixel ({pixel.x}, {pixel.y}) outside {size}x{size} grid"
            )
        if pixel.key in indexed:
            raise InvariantViolation(f"Duplicate pixel at ({pixel.x}, {pixel.y})")
        indexed[pixel.key] = pixel
    return indexed


@dataclass
class Document:
    """The persisted state of one pixel-art document.

    Engine operations take a Document explicitly and mutate it in place;
    there is no module-level store.
    """

    size: int = DEFAULT_GRID_SIZE
    pixels: Dict[Key, Pixel] = field(default_factory=dict)
    palette: List[str] = field(default_factory=lambda: list(DEFAULT_PALETTE))
    data_groups: List[DataGroup] = field(default_factory=default_data_groups)
    color_types: List[ColorType] = field(default_factory=list)

    def get(self, x: int, y: int) -> Optional[Pixel]:
        return self.pixels.get((x, y))

    def sorted_pixels(self) -> List[Pixel]:
        """Pixels in row-major order."""
        return [self.pixels[k] for k in sorted(self.pixels, key=lambda k: (k[1], k[0]))]

    def data_group_ids(self) -> set:
        return {g.id for g in self.data_groups} | {NO_DATA_GROUP}

    def color_type_ids(self) -> set:
        return {t.id for t in self.color_types} | {NO_COLOR_TYPE}

    def copy(self) -> "Document":
        return copy.deepcopy(self)
