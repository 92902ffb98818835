# brick_mosaic/sections.py
from __future__ import annotations

"""
Section tiler.

Splits a mosaic footprint into tiles of at most section_size x section_size
columns, and each tile's height into slabs of at most section_size voxels.
Tiles and slabs are processed independently and never interact.
"""

from typing import Callable, List, Tuple

from .constants import SECTION_SIZE
from .pixels import Pixels

SectionBounds = Tuple[int, int, int, int]  # (section_l, section_w, length, width)
Slab = Tuple[int, int]  # (section_h, slab_height)


def _check_section_size(section_size: int) -> int:
    if int(section_size) < 1:
        raise ValueError(f"section_size must be >= 1, got {section_size}")
    return int(section_size)


def make_sections(
    length: int, width: int, section_size: int = SECTION_SIZE
) -> List[SectionBounds]:
    """
    Tile [0, length) x [0, width) in raster order, l outer and w inner.
    Edge tiles are clipped to the footprint.
    """
    size = _check_section_size(section_size)
    sections: List[SectionBounds] = []
    for section_l in range(0, max(0, length), size):
        section_length = min(size, length - section_l)
        for section_w in range(0, max(0, width), size):
            section_width = min(size, width - section_w)
            sections.append((section_l, section_w, section_length, section_width))
    return sections


def height_slabs(max_height: int, section_size: int = SECTION_SIZE) -> List[Slab]:
    """Cut [0, max_height) into slabs from the ground up."""
    size = _check_section_size(section_size)
    return [
        (section_h, min(size, max_height - section_h))
        for section_h in range(0, max(0, max_height), size)
    ]


def slab_height_fn(
    height_map: Pixels, section_h: int, section_size: int = SECTION_SIZE
) -> Callable[[int, int], int]:
    """
    Column heights local to one slab: the part of each column at or above
    section_h, capped at section_size.
    """

    def _height(l: int, w: int) -> int:
        height = int(height_map.value(l, w))
        if height <= section_h:
            return 0
        return min(section_size, height - section_h)

    return _height


__all__ = ["SectionBounds", "Slab", "make_sections", "height_slabs", "slab_height_fn"]
