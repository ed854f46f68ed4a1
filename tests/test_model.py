"""Tests for model module."""
from __future__ import annotations

import pytest

from pixel_grid.config import InvariantViolation, PixelGridError
from pixel_grid.model import (
    ColorType,
    DataGroup,
    Document,
    Pixel,
    Position,
    check_invariants,
    format_key,
    parse_key,
)


class TestKeys:
    """Tests for 'x,y' key helpers."""

    def test_format(self) -> None:
        assert format_key((3, 12)) == "3,12"

    def test_parse(self) -> None:
        assert parse_key("3,12") == (3, 12)
        assert parse_key(format_key((0, 7))) == (0, 7)

    @pytest.mark.parametrize("text", ["", "3", "3,4,5", "a,b"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(PixelGridError, match="Invalid pixel key"):
            parse_key(text)

    def test_position_key(self) -> None:
        assert Position(2, 5).key == (2, 5)


class TestCheckInvariants:
    """Tests for check_invariants."""

    def test_indexes_by_key(self) -> None:
        indexed = check_invariants([Pixel(1, 0, 0, 0, 0), Pixel(0, 1, 0, 0, 0)], 2)
        assert set(indexed) == {(1, 0), (0, 1)}

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (2, 0), (0, 2)])
    def test_out_of_bounds(self, x: int, y: int) -> None:
        with pytest.raises(InvariantViolation, match="outside"):
            check_invariants([Pixel(x, y, 0, 0, 0)], 2)

    def test_size_zero_rejects_any_pixel(self) -> None:
        with pytest.raises(InvariantViolation):
            check_invariants([Pixel(0, 0, 0, 0, 0)], 0)


class TestDocument:
    """Tests for Document."""

    def test_defaults(self) -> None:
        doc = Document()
        assert doc.size == 32
        assert len(doc.palette) == 9
        assert doc.data_groups == [DataGroup(id=0, name="None")]
        assert doc.color_types == []

    def test_instances_do_not_share_state(self) -> None:
        a, b = Document(), Document()
        a.palette.append("#010101")
        a.data_groups.append(DataGroup(1, "x"))
        assert len(b.palette) == 9
        assert len(b.data_groups) == 1

    def test_sorted_pixels_row_major(self) -> None:
        doc = Document(size=3)
        for key in [(2, 0), (0, 1), (1, 0), (0, 0)]:
            doc.pixels[key] = Pixel(key[0], key[1], 0, 0, 0)
        assert [p.key for p in doc.sorted_pixels()] == [(0, 0), (1, 0), (2, 0), (0, 1)]

    def test_registry_ids_include_none(self) -> None:
        doc = Document(data_groups=[], color_types=[ColorType(3, "c")])
        assert doc.data_group_ids() == {0}
        assert doc.color_type_ids() == {0, 3}

    def test_copy_is_deep(self) -> None:
        doc = Document(size=1)
        doc.pixels[(0, 0)] = Pixel(0, 0, 1, 1, 1)
        clone = doc.copy()
        clone.pixels[(0, 0)].r = 9
        assert doc.get(0, 0).r == 1
