"""Snapshot-based undo history."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config import MAX_UNDO_STACK_SIZE, EmptyHistory, PixelGridError
from .model import ColorType, DataGroup, Document, Key, Pixel

logger = logging.getLogger("pixel_grid")


@dataclass
class Snapshot:
    """Deep copy of the undoable document fields (size is not included)."""

    pixels: Dict[Key, Pixel]
    palette: List[str]
    data_groups: List[DataGroup]
    color_types: List[ColorType]

    @classmethod
    def capture(cls, doc: Document) -> "Snapshot":
        return cls(
            pixels=copy.deepcopy(doc.pixels),
            palette=list(doc.palette),
            data_groups=copy.deepcopy(doc.data_groups),
            color_types=copy.deepcopy(doc.color_types),
        )

    def restore(self, doc: Document) -> None:
        doc.pixels = copy.deepcopy(self.pixels)
        doc.palette = list(self.palette)
        doc.data_groups = copy.deepcopy(self.data_groups)
        doc.color_types = copy.deepcopy(self.color_types)


@dataclass
class Command:
    """A user action: a label plus a mutation applied to the document."""

    label: str
    apply: Callable[[Document], Any]


class HistoryManager:
    """Undo stack of whole-document snapshots. There is no redo."""

    def __init__(self, max_size: Optional[int] = MAX_UNDO_STACK_SIZE) -> None:
        if max_size is not None and max_size < 1:
            raise PixelGridError("History max_size must be at least 1")
        self.max_size = max_size
        self._stack: List[Snapshot] = []

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def can_undo(self) -> bool:
        return bool(self._stack)

    def save_state(self, doc: Document) -> None:
        """Push a snapshot of ``doc``, dropping the oldest beyond max_size."""
        self._push(Snapshot.capture(doc))

    def _push(self, snapshot: Snapshot) -> None:
        self._stack.append(snapshot)
        if self.max_size is not None and len(self._stack) > self.max_size:
            del self._stack[: len(self._stack) - self.max_size]
        logger.debug(f"History depth: {len(self._stack)}")

    def undo(self, doc: Document) -> None:
        """Restore the most recent snapshot into ``doc``.

        Raises:
            EmptyHistory: If there is nothing to undo. ``doc`` is unchanged.
        """
        if not self._stack:
            raise EmptyHistory("Nothing to undo")
        self._stack.pop().restore(doc)
        logger.debug(f"Undo; history depth: {len(self._stack)}")

    def clear(self) -> None:
        self._stack.clear()

    def execute(self, doc: Document, command: Command) -> Any:
        """Snapshot, then apply ``command``.

        If the command raises, the document is rolled back to the snapshot,
        the undo stack is left as it was and the exception propagates.
        """
        snapshot = Snapshot.capture(doc)
        try:
            result = command.apply(doc)
        except Exception:
            snapshot.restore(doc)
            logger.debug(f"Command '{command.label}' failed, rolled back")
            raise
        self._push(snapshot)
        logger.debug(f"Executed '{command.label}'")
        return result
