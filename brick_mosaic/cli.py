#!/usr/bin/env python3
"""
brick_mosaic.cli
Turn an image into a brick mosaic and report the pieces it needs.

Usage:
  brick-mosaic INPUT [--height H] [--resample nearest|bilinear|bicubic|lanczos]
               [--palette euclidean|ciede2000|hyab] [--depth D] [--relief]
               [--catalog unit|plates|bricks|standard] [--exclude "PIECE:COLOUR"]
               [--section-size N] [--json OUT] [--debug]

Heights:
  Every visible pixel becomes a column of --depth plates. With --relief the
  column height follows brightness instead, from 1 (darkest) to --depth.
  Fully transparent pixels are left empty.

Exclusions:
  "Plate 1x2:Red" forbids that piece in that colour. Append 'r' to the size
  ("Plate 1x2r:Red") to forbid only the rotated orientation.

Output:
  A brick usage report on stdout. With --json, every placement is also written
  to OUT as a JSON list.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from .catalog import PLATE_1X1, CATALOGS, catalog_by_name, find_piece
from .constants import (
    DEFAULT_CATALOG,
    DEFAULT_DEPTH,
    DEFAULT_PALETTE,
    SECTION_SIZE,
)
from .core_types import Brick, Color, Exclusion, PaletteColor, U8Image, rgba_to_hex
from .errors import MosaicError
from .image_io import ArrayImage, is_image_file, load_image_rgba, resize_rgba_height
from .mosaic import Mosaic
from .palette import make_palette
from .palette_data import build_palette
from .utils import (
    brick_usage_report,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    pillow_resample_from_name,
    print_banner,
    print_config_line,
)


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: input image path
        height: optional int max image height before building
        resample: resize filter name
        palette: "euclidean" | "ciede2000" | "hyab"
        depth: column height in plates
        relief: bool, scale heights by brightness
        catalog: built-in catalog name
        exclude: list of "PIECE:COLOUR" strings
        section_size: tile and slab edge
        json: optional Path for the placement list
        debug: bool for per-section details
    """
    parser = argparse.ArgumentParser(
        prog="brick-mosaic",
        description="Build a brick mosaic from an image and list the pieces it uses.",
    )
    parser.add_argument("src", type=Path, help="Input image")
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Resize so height<=H studs. Omit for no resize.",
    )
    parser.add_argument(
        "--resample",
        choices=["nearest", "bilinear", "bicubic", "lanczos"],
        default="lanczos",
        help="Scaling filter used with --height.",
    )
    parser.add_argument(
        "--palette",
        choices=["euclidean", "ciede2000", "hyab"],
        default=DEFAULT_PALETTE,
        help="Colour matching.",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=DEFAULT_DEPTH,
        help="Column height in plates (maximum height with --relief).",
    )
    parser.add_argument(
        "--relief",
        action="store_true",
        help="Scale column heights by pixel brightness.",
    )
    parser.add_argument(
        "--catalog",
        choices=sorted(CATALOGS),
        default=DEFAULT_CATALOG,
        help="Pieces available to the reducer.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PIECE:COLOUR",
        help='Forbid a piece in a colour, e.g. "Plate 1x2:Red". Repeatable.',
    )
    parser.add_argument(
        "--section-size",
        type=int,
        default=SECTION_SIZE,
        help="Tile and height slab edge.",
    )
    parser.add_argument(
        "--json", type=Path, default=None, help="Write placements as JSON (optional)"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose build details")
    return parser.parse_args(argv)


def parse_exclusions(
    entries: Sequence[str], catalog: List[Brick], palette: List[PaletteColor]
) -> List[Exclusion]:
    """Turn "PIECE:COLOUR" strings into (oriented piece, palette colour) pairs."""
    by_name: Dict[str, PaletteColor] = {c.name.lower(): c for c in palette}
    out: List[Exclusion] = []
    for entry in entries:
        piece_id, sep, colour_name = entry.rpartition(":")
        if not sep or not piece_id.strip():
            raise ValueError(f"exclusion must look like PIECE:COLOUR, got {entry!r}")
        colour = by_name.get(colour_name.strip().lower())
        if colour is None:
            raise ValueError(f"unknown colour {colour_name.strip()!r} in {entry!r}")
        piece = find_piece(piece_id, catalog)
        out.append((piece, colour))
        if not piece.rotated and not piece.is_square:
            out.append((piece.rotate_90(), colour))
    return out


def relief_heights(rgba: U8Image, depth: int, relief: bool) -> np.ndarray:
    """
    Column heights as an (H, W) int array. Transparent pixels get 0.
    With relief, brightness maps linearly onto 1..depth.
    """
    depth = max(1, int(depth))
    visible = rgba[..., 3] > 0
    if relief:
        luma = (
            0.2126 * rgba[..., 0].astype(np.float32)
            + 0.7152 * rgba[..., 1].astype(np.float32)
            + 0.0722 * rgba[..., 2].astype(np.float32)
        ) / 255.0
        heights = 1 + np.rint(luma * (depth - 1)).astype(np.int64)
    else:
        heights = np.full(rgba.shape[:2], depth, dtype=np.int64)
    return np.where(visible, heights, 0)


def placements_to_json(mosaic: Mosaic) -> List[Dict[str, object]]:
    out: List[Dict[str, object]] = []
    for placed in mosaic.iter():
        color: Color = placed.color
        entry: Dict[str, object] = {
            "l": placed.l,
            "w": placed.w,
            "h": placed.h,
            "piece": placed.brick.id,
            "rotated": placed.brick.rotated,
            "length": placed.length,
            "width": placed.width,
            "height": placed.height,
        }
        if isinstance(color, PaletteColor):
            entry["colour"] = color.name
            entry["hex"] = rgba_to_hex(color.rgba)
        else:
            entry["colour"] = str(color)
        out.append(entry)
    return out


def build_mosaic(
    rgba: U8Image,
    palette_kind: str,
    depth: int,
    relief: bool,
    catalog_name: str,
    exclude: Sequence[str],
    section_size: int,
    debug: bool,
) -> Mosaic:
    """Quantize, build at voxel resolution, then reduce with the chosen catalog."""
    colours = build_palette()
    palette = make_palette(palette_kind, colours)
    catalog = catalog_by_name(catalog_name)
    exclusions = parse_exclusions(exclude, catalog, colours)
    heights = relief_heights(rgba, depth, relief)

    t0 = time.perf_counter()
    mosaic = Mosaic.from_image(
        ArrayImage(rgba),
        palette,
        lambda l, w, _color: int(heights[w, l]),
        lambda _l, _w, _h, _color: PLATE_1X1,
        section_size=section_size,
        debug=debug,
    )
    t1 = time.perf_counter()
    reduced = mosaic.reduce_bricks(catalog, exclusions, debug=debug)
    t2 = time.perf_counter()

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Build", format_seconds_compact(t1 - t0)),
                    ("Reduce", format_seconds_compact(t2 - t1)),
                    ("Exclusions", len(exclusions)),
                ]
            )
        )
    return reduced


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point. Exits with status 2 on bad input."""
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    t_start = time.perf_counter()

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        sys.exit(2)
    if not is_image_file(src):
        error(f"not an image: {src}")
        sys.exit(2)
    if args.depth < 1:
        error(f"--depth must be >= 1, got {args.depth}")
        sys.exit(2)

    print_banner(src.name)
    print_config_line(
        "mosaic",
        [
            ("Palette", args.palette),
            ("Catalog", args.catalog),
            ("Depth", args.depth),
            ("Relief", args.relief),
            ("Section", args.section_size),
        ],
        debug=False,
    )

    rgba = load_image_rgba(src)
    height0, width0 = rgba.shape[0], rgba.shape[1]
    rgba = resize_rgba_height(rgba, args.height, pillow_resample_from_name(args.resample))
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{width0}x{height0}"),
                    ("Mosaic", f"{rgba.shape[1]}x{rgba.shape[0]}"),
                    ("Resample", args.resample),
                ]
            )
        )

    try:
        mosaic = build_mosaic(
            rgba,
            args.palette,
            args.depth,
            args.relief,
            args.catalog,
            args.exclude,
            args.section_size,
            args.debug,
        )
    except (MosaicError, ValueError) as e:
        error(str(e))
        sys.exit(2)

    log(f"Size: {mosaic.length}x{mosaic.width} studs, {mosaic.max_height() or 0} plates tall")
    log("Pieces used:")
    for piece, colour, count in brick_usage_report(mosaic.iter()):
        log(f"  {piece}  {colour}: {count:,}")
    log(f"Total pieces: {mosaic.brick_count():,}")

    if args.json is not None:
        args.json.write_text(json.dumps(placements_to_json(mosaic), indent=1))
        log(f"Wrote {args.json.name}")

    log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")


if __name__ == "__main__":
    main()
