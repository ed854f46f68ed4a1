"""Tests for config module."""
from __future__ import annotations

import pytest

from pixel_grid.config import (
    DEFAULT_PALETTE,
    Config,
    DecodeFailure,
    EmptyHistory,
    ImportValidationError,
    InvalidFileType,
    InvariantViolation,
    PixelGridError,
    clamp_grid_size,
    validate_image_dimensions,
    validate_scale_mode,
)


class TestConfig:
    """Tests for Config dataclass."""

    def test_default_values(self) -> None:
        """Config should have sensible defaults."""
        config = Config()
        assert config.size == 32
        assert config.scale_mode == "majority"
        assert config.alpha_cutoff == 10
        assert config.cell_size == 1
        assert config.palette is None
        assert config.max_undo == 50

    def test_custom_values(self) -> None:
        """Config should accept custom values."""
        config = Config(size=64, scale_mode="nearest", palette=["#000000"])
        assert config.size == 64
        assert config.scale_mode == "nearest"
        assert config.palette == ["#000000"]

    def test_paths(self) -> None:
        """Config should store input/output paths."""
        config = Config(input_path="in.png", output_path="out.png")
        assert config.input_path == "in.png"
        assert config.output_path == "out.png"

    def test_palette_or_default(self) -> None:
        assert Config().palette_or_default() == DEFAULT_PALETTE
        assert Config(palette=["#123456"]).palette_or_default() == ["#123456"]

    def test_palette_or_default_is_a_copy(self) -> None:
        palette = Config().palette_or_default()
        palette.append("#000001")
        assert "#000001" not in DEFAULT_PALETTE


class TestValidateImageDimensions:
    """Tests for validate_image_dimensions function."""

    def test_valid_dimensions(self) -> None:
        """Should accept valid dimensions."""
        validate_image_dimensions(100, 100)
        validate_image_dimensions(1, 1)
        validate_image_dimensions(10000, 10000)

    def test_zero_width(self) -> None:
        """Should reject zero width."""
        with pytest.raises(DecodeFailure, match="cannot be zero"):
            validate_image_dimensions(0, 100)

    def test_zero_height(self) -> None:
        """Should reject zero height."""
        with pytest.raises(DecodeFailure, match="cannot be zero"):
            validate_image_dimensions(100, 0)

    def test_too_large(self) -> None:
        """Should reject sides over 10000."""
        with pytest.raises(DecodeFailure, match="too large"):
            validate_image_dimensions(10001, 100)
        with pytest.raises(DecodeFailure, match="too large"):
            validate_image_dimensions(100, 10001)


class TestGridSettings:
    """Tests for grid size and scale mode helpers."""

    @pytest.mark.parametrize(
        "requested,expected",
        [(1, 8), (8, 8), (32, 32), (256, 256), (1000, 256), (-4, 8)],
    )
    def test_clamp_grid_size(self, requested: int, expected: int) -> None:
        assert clamp_grid_size(requested) == expected

    def test_validate_scale_mode(self) -> None:
        assert validate_scale_mode("nearest") == "nearest"
        with pytest.raises(PixelGridError, match="Unknown scale mode"):
            validate_scale_mode("lanczos")


class TestPixelGridError:
    """Tests for the exception hierarchy."""

    def test_is_exception(self) -> None:
        """Should be a proper Exception subclass."""
        assert issubclass(PixelGridError, Exception)

    @pytest.mark.parametrize(
        "exc",
        [InvalidFileType, DecodeFailure, EmptyHistory, ImportValidationError, InvariantViolation],
    )
    def test_subclasses(self, exc) -> None:
        assert issubclass(exc, PixelGridError)

    def test_message(self) -> None:
        """Should preserve error message."""
        error = PixelGridError("test message")
        assert str(error) == "test message"
