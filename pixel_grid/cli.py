"""Command-line interface for pixel grid."""
from __future__ import annotations

import io
import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from PIL import Image

logger = logging.getLogger("pixel_grid")

from .config import Config, PixelGridError, validate_scale_mode
from .convert import convert_raster
from .grid import regroup, set_palette, set_pixels
from .model import Document
from .project_io import export_json, export_png_bytes
from .raster import decode_image_bytes
from .render import project, rasterize


@dataclass
class ProcessingResult:
    """Result of converting an image, including the grid document."""

    output_bytes: bytes
    document: Document


def process_image_bytes(
    input_bytes: bytes, config: Optional[Config] = None
) -> bytes:
    """Convert image bytes into a pixel-grid PNG.

    Args:
        input_bytes: Input image as PNG/JPEG bytes.
        config: Configuration options. Uses defaults if None.

    Returns:
        Output PNG image bytes.
    """
    result = process_image_bytes_with_grid(input_bytes, config)
    return result.output_bytes


def process_image_bytes_with_grid(
    input_bytes: bytes, config: Optional[Config] = None
) -> ProcessingResult:
    """Convert image bytes and return the PNG together with the document.

    Args:
        input_bytes: Input image as PNG/JPEG bytes.
        config: Configuration options. Uses defaults if None.

    Returns:
        ProcessingResult with output bytes and the populated document.
    """
    config = config or Config()
    if config.size < 0:
        raise PixelGridError("size must be a non-negative integer")

    t0 = time.perf_counter()
    raster = decode_image_bytes(input_bytes)
    t1 = time.perf_counter()

    pixels = convert_raster(raster, config.size, config.scale_mode, config.alpha_cutoff)
    t2 = time.perf_counter()

    doc = Document(size=config.size)
    set_palette(doc, config.palette_or_default())
    set_pixels(doc, pixels)
    regroup(doc)
    t3 = time.perf_counter()

    output_bytes = export_png_bytes(doc, config.cell_size)
    t4 = time.perf_counter()

    if config.timing:
        print(
            "Timing (s): "
            f"decode={t1 - t0:.4f}, "
            f"convert={t2 - t1:.4f}, "
            f"regroup={t3 - t2:.4f}, "
            f"encode={t4 - t3:.4f}, "
            f"total={t4 - t0:.4f}"
        )

    return ProcessingResult(output_bytes=output_bytes, document=doc)


def process_image(config: Config) -> None:
    """Convert an image file and write the outputs named in config.

    Args:
        config: Configuration with input/output paths.
    """
    print(f"Processing: {config.input_path}")
    with open(config.input_path, "rb") as f:
        img_bytes = f.read()

    result = process_image_bytes_with_grid(img_bytes, config)
    with open(config.output_path, "wb") as f:
        f.write(result.output_bytes)
    print(f"Saved to: {config.output_path}")

    if config.json_path:
        with open(config.json_path, "w", encoding="utf-8") as f:
            json.dump(export_json(result.document), f, indent=2)
        print(f"Saved grid data to: {config.json_path}")

    if config.preview:
        preview_side_by_side(img_bytes, result.document)


def preview_side_by_side(
    input_bytes: bytes,
    doc: Document,
    min_side: int = 400,
) -> None:
    """Show the input image next to the projected grid.

    Args:
        input_bytes: Original image bytes.
        doc: Converted document.
        min_side: Target on-screen side length for both panes.
    """
    input_img = Image.open(io.BytesIO(input_bytes)).convert("RGBA")
    cell = max(1, min_side // max(doc.size, 1))
    side = max(doc.size, 1) * cell

    scaled_input = input_img.resize((side, side), resample=Image.NEAREST)
    grid_img = rasterize(project(doc.pixels.values(), doc.size, cell), side, side)

    gap = 4
    preview_img = Image.new("RGBA", (side * 2 + gap, side), (40, 40, 40, 255))
    preview_img.paste(scaled_input, (0, 0))
    preview_img.paste(grid_img, (side + gap, 0), grid_img)
    preview_img.show(title="Pixel Grid Preview")


def _parse_palette(value: str) -> List[str]:
    colors = [c.strip() for c in value.split(",") if c.strip()]
    if not colors:
        raise PixelGridError("palette must list at least one hex color")
    return colors


def _parse_positive(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise PixelGridError(f"Invalid {name} value: '{value}'")
    if parsed <= 0:
        raise PixelGridError(f"{name} must be a positive integer")
    return parsed


def parse_args(argv: Sequence[str]) -> Config:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (including program name).

    Returns:
        Configured Config instance.

    Raises:
        PixelGridError: If arguments are invalid.
    """
    args = list(argv[1:])
    preview = False
    timing = False
    debug = False
    scale_mode = "majority"
    cell_size = 1
    palette: Optional[List[str]] = None
    json_path: Optional[str] = None
    positional: List[str] = []

    options_with_value = ("--mode", "--cell-size", "--palette", "--json")

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--preview":
            preview = True
            i += 1
        elif arg == "--timing":
            timing = True
            i += 1
        elif arg == "--debug":
            debug = True
            i += 1
        elif arg in options_with_value:
            if i + 1 >= len(args):
                raise PixelGridError(_usage_message())
            value = args[i + 1]
            if arg == "--mode":
                scale_mode = value.lower()
            elif arg == "--cell-size":
                cell_size = _parse_positive("cell-size", value)
            elif arg == "--palette":
                palette = _parse_palette(value)
            else:
                json_path = value
            i += 2
        else:
            positional.append(arg)
            i += 1

    validate_scale_mode(scale_mode)

    if len(positional) < 2 or len(positional) > 3:
        raise PixelGridError(_usage_message())

    config = Config(
        input_path=positional[0],
        output_path=positional[1],
        scale_mode=scale_mode,
        cell_size=cell_size,
        palette=palette,
        json_path=json_path,
        preview=preview,
        timing=timing,
    )

    if len(positional) == 3:
        try:
            size = int(positional[2])
            if size > 0:
                config.size = size
            else:
                print(
                    f"Warning: invalid size '{positional[2]}', "
                    f"falling back to default ({config.size})"
                )
        except ValueError:
            print(
                f"Warning: invalid size '{positional[2]}', "
                f"falling back to default ({config.size})"
            )

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s"
        )
        logging.getLogger("pixel_grid").setLevel(logging.DEBUG)

    return config


def _usage_message() -> str:
    """Return usage message string."""
    return (
        "Usage: pixel-grid input.png output.png [size] "
        "[--mode majority|nearest] [--cell-size N] [--palette HEX,HEX,...] "
        "[--json PATH] [--preview] [--timing] [--debug]"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments. Defaults to sys.argv.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    try:
        config = parse_args(sys.argv if argv is None else argv)
        process_image(config)
        return 0
    except PixelGridError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"Processing error: {exc}", file=sys.stderr)
        return 1
