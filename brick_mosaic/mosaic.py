# brick_mosaic/mosaic.py
from __future__ import annotations

"""
Mosaic aggregator.

A Mosaic is built once from an image at voxel resolution (every brick 1x1x1)
and can then be reduced any number of times. Each reduction returns a new
Mosaic derived from the current one.

Exports:
  Section
  Mosaic.from_image(image, palette, height_fn, brick_fn, ...)
  Mosaic.reduce_bricks(catalog, exclusions=())
  Mosaic.iter()
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .chunks import BrickCache, Chunk, build_chunks
from .constants import SECTION_SIZE
from .core_types import (
    Brick,
    BrickFn,
    Color,
    Exclusion,
    HeightFn,
    Image,
    Palette,
    PaletteColor,
    PlacedBrick,
)
from .pixels import Pixels, raw_pixels
from .reduce import CatalogIndex, reduce_chunk
from .sections import height_slabs, make_sections, slab_height_fn
from .utils import debug_log, key_value_pairs_to_string


@dataclass(frozen=True)
class Section:
    """Chunks of one tile and height slab, with the slab's global offset."""

    l: int
    w: int
    h: int
    chunks: Tuple[Chunk, ...]


class Mosaic:
    """Immutable set of chunks covering an image's voxels."""

    def __init__(self, sections: Iterable[Section], length: int, width: int) -> None:
        kept: List[Section] = []
        for section in sections:
            chunks = tuple(c for c in section.chunks if not c.is_degenerate())
            if chunks:
                kept.append(Section(section.l, section.w, section.h, chunks))
        self._sections: Tuple[Section, ...] = tuple(kept)
        self._length = int(length)
        self._width = int(width)

    @classmethod
    def from_image(
        cls,
        image: Image,
        palette: Palette,
        height_fn: HeightFn,
        brick_fn: BrickFn,
        *,
        default_color: Color = PaletteColor(),
        section_size: int = SECTION_SIZE,
        debug: bool = False,
    ) -> "Mosaic":
        """
        Build a voxel-resolution mosaic.

        Args:
          image        : pixel(l, w), length(), width()
          palette      : nearest(raw) -> colour or None
          height_fn    : (l, w, colour) -> filled voxels in column (l, w)
          brick_fn     : (l, w, h, colour) -> unit brick for that voxel
          default_color: colour for pixels the palette cannot match
          section_size : tile and slab edge, at most 255 keeps local
                         coordinates within one byte
          debug        : print per-section stats

        Every pixel is read and quantized once, height_fn runs once per
        column and brick_fn once per voxel.

        Raises:
          NotUnitBrickError    : brick_fn returned a brick that is not 1x1x1
          PointerTooSmallError : a section's voxels cannot be indexed
        """
        image_length = int(image.length())
        image_width = int(image.width())
        sections: List[Section] = []

        # One tile at a time; local coordinates stay below section_size
        for section_l, section_w, section_length, section_width in make_sections(
            image_length, image_width, section_size
        ):
            colors = raw_pixels(
                image, section_l, section_w, section_length, section_width
            ).with_palette(palette, default_color)

            height_map = Pixels.from_fn(
                lambda l, w: max(
                    0, int(height_fn(l + section_l, w + section_w, colors.value(l, w)))
                ),
                section_length,
                section_width,
                dtype=np.int64,
            )

            for section_h, slab_height in height_slabs(height_map.max(), section_size):
                select_brick = BrickCache(
                    lambda l, w, h, color, _h=section_h: brick_fn(
                        l + section_l, w + section_w, h + _h, color
                    )
                )
                chunks = build_chunks(
                    section_length,
                    section_width,
                    slab_height,
                    slab_height_fn(height_map, section_h, section_size),
                    select_brick,
                    colors.value,
                )
                sections.append(Section(section_l, section_w, section_h, tuple(chunks)))

                if debug:
                    debug_log(
                        key_value_pairs_to_string(
                            [
                                ("Section", f"{section_l},{section_w},{section_h}"),
                                ("Size", f"{section_length}x{section_width}x{slab_height}"),
                                ("Chunks", len(chunks)),
                                ("Voxels", sum(c.volume() for c in chunks)),
                            ]
                        )
                    )

        return cls(sections, image_length, image_width)

    def reduce_bricks(
        self,
        catalog: Iterable[Brick],
        exclusions: Iterable[Exclusion] = (),
        *,
        debug: bool = False,
    ) -> "Mosaic":
        """
        Return a new mosaic whose chunks use the catalog's larger bricks.

        Catalog entries are grouped by their unit brick; chunks whose unit
        brick has no catalog entries are kept as they are. Each (shape, colour)
        exclusion forbids that orientation of the shape for that colour.
        """
        index = CatalogIndex(catalog, exclusions)
        sections: List[Section] = []
        for section in self._sections:
            chunks: List[Chunk] = []
            for chunk in section.chunks:
                shapes = index.shapes_for(chunk.unit_brick, chunk.color)
                chunks.append(chunk if shapes is None else reduce_chunk(chunk, shapes))
            sections.append(Section(section.l, section.w, section.h, tuple(chunks)))

        reduced = Mosaic(sections, self._length, self._width)
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Bricks before", self.brick_count()),
                        ("Bricks after", reduced.brick_count()),
                        ("Voxels", reduced.volume()),
                    ]
                )
            )
        return reduced

    @property
    def length(self) -> int:
        return self._length

    @property
    def width(self) -> int:
        return self._width

    @property
    def sections(self) -> Tuple[Section, ...]:
        return self._sections

    def chunks(self) -> Iterator[Tuple[Section, Chunk]]:
        for section in self._sections:
            for chunk in section.chunks:
                yield section, chunk

    def iter(self) -> Iterator[PlacedBrick]:
        """Every brick at mosaic coordinates: chunk offset plus section offset."""
        for section, chunk in self.chunks():
            for brick in chunk.bricks:
                yield PlacedBrick(
                    l=section.l + chunk.l + brick.l,
                    w=section.w + chunk.w + brick.w,
                    h=section.h + chunk.h + brick.h,
                    brick=brick.brick,
                    color=chunk.color,
                )

    def __iter__(self) -> Iterator[PlacedBrick]:
        return self.iter()

    def brick_count(self) -> int:
        return sum(len(chunk.bricks) for _, chunk in self.chunks())

    def volume(self) -> int:
        return sum(chunk.volume() for _, chunk in self.chunks())

    def max_height(self) -> Optional[int]:
        """Top of the tallest chunk, or None for an empty mosaic."""
        tops = [s.h + c.h + c.height for s, c in self.chunks()]
        return max(tops) if tops else None

    def __repr__(self) -> str:
        return (
            f"Mosaic(length={self._length}, width={self._width}, "
            f"sections={len(self._sections)}, bricks={self.brick_count()})"
        )


__all__ = ["Section", "Mosaic"]
