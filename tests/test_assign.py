"""Tests for assign module."""
from __future__ import annotations

import copy

import pytest

from pixel_grid.assign import assign_to_color_type, assign_to_data_group
from pixel_grid.model import ColorType, Document


class TestAssignToDataGroup:
    """Tests for assign_to_data_group."""

    def test_assigns_listed_pixels(self, full_document: Document) -> None:
        count = assign_to_data_group(full_document, [(0, 0), (3, 3)], 2)

        assert count == 2
        assert full_document.get(0, 0).data_group == 2
        assert full_document.get(3, 3).data_group == 2
        assert full_document.get(1, 0).data_group == 0

    def test_other_fields_untouched(self, full_document: Document) -> None:
        full_document.get(0, 0).color_type = 5
        assign_to_data_group(full_document, [(0, 0)], 2)
        pixel = full_document.get(0, 0)
        assert (pixel.rgb, pixel.color_type, pixel.color_group) == ((255, 0, 0), 5, -1)

    def test_missing_keys_ignored(self, full_document: Document) -> None:
        """Keys without a pixel are skipped; no pixel is created."""
        full_document.pixels.pop((0, 0))
        assert assign_to_data_group(full_document, [(0, 0), (9, 9)], 2) == 0
        assert (0, 0) not in full_document.pixels

    def test_duplicate_keys_counted_once(self, full_document: Document) -> None:
        assert assign_to_data_group(full_document, [(1, 1), (1, 1)], 2) == 1

    def test_unknown_group_coerced_to_none(self, full_document: Document) -> None:
        full_document.get(0, 0).data_group = 2
        assign_to_data_group(full_document, [(0, 0)], 99)
        assert full_document.get(0, 0).data_group == 0

    def test_assign_none(self, full_document: Document) -> None:
        full_document.get(0, 0).data_group = 2
        assign_to_data_group(full_document, [(0, 0)], 0)
        assert full_document.get(0, 0).data_group == 0

    def test_color_group_filter(self, full_document: Document) -> None:
        full_document.get(0, 0).color_group = 1
        count = assign_to_data_group(full_document, [(0, 0), (1, 0)], 2, only_color_group=1)
        assert count == 1
        assert full_document.get(1, 0).data_group == 0

    def test_negative_filter_is_no_filter(self, full_document: Document) -> None:
        assert assign_to_data_group(full_document, [(0, 0), (1, 0)], 2, only_color_group=-1) == 2


class TestAssignToColorType:
    """Tests for assign_to_color_type."""

    def test_assigns_registered_type(self, full_document: Document) -> None:
        full_document.color_types.append(ColorType(id=1, name="Color 1", color="#ff0000"))
        count = assign_to_color_type(full_document, [(2, 2)], 1)
        assert count == 1
        assert full_document.get(2, 2).color_type == 1
        assert full_document.get(2, 2).data_group == 0

    def test_unknown_type_coerced_to_none(self, full_document: Document) -> None:
        full_document.get(0, 0).color_type = 3
        assign_to_color_type(full_document, [(0, 0)], 3)
        assert full_document.get(0, 0).color_type == 0


class TestIdempotency:
    """Applying an assignment twice equals applying it once."""

    @pytest.mark.parametrize("group_id", [2, 0, 99])
    def test_data_group(self, group_id: int, full_document: Document) -> None:
        keys = [(0, 0), (1, 1), (3, 2)]
        assign_to_data_group(full_document, keys, group_id)
        once = copy.deepcopy(full_document)

        assign_to_data_group(full_document, keys, group_id)
        assert full_document == once

    @pytest.mark.parametrize("type_id", [1, 0, 7])
    def test_color_type(self, type_id: int, full_document: Document) -> None:
        full_document.color_types.append(ColorType(id=1, name="Color 1"))
        keys = [(2, 0), (2, 1), (2, 2)]
        assign_to_color_type(full_document, keys, type_id)
        once = copy.deepcopy(full_document)

        assign_to_color_type(full_document, keys, type_id)
        assert full_document == once

    def test_filtered_assignment(self, full_document: Document) -> None:
        full_document.get(0, 0).color_group = 1
        keys = [(0, 0), (1, 0)]
        assign_to_data_group(full_document, keys, 2, only_color_group=1)
        once = copy.deepcopy(full_document)

        assign_to_data_group(full_document, keys, 2, only_color_group=1)
        assert full_document == once
