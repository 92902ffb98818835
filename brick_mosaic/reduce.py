# brick_mosaic/reduce.py
from __future__ import annotations

"""
Brick reducer.

Replaces the unit bricks of a chunk with fewer, larger catalog bricks.

For every empty cell, the largest catalog footprint that fits there and in the
cells around it is placed. This greedy approach is not always optimal, but its
solutions are usually optimal or close to it; finding an optimal tiling is an
exact cover problem. The unit brick is always available, so every voxel ends
up covered.

Exports:
  CatalogIndex(catalog, exclusions)
  plan_layers(total_height, heights) -> list[int]
  pack_layer(empty, shapes) -> (placements, leftover)
  reduce_chunk(chunk, shapes) -> Chunk
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .chunks import Chunk, ChunkBrick
from .core_types import Brick, Color, Exclusion

OrientationKey = Tuple[str, Brick, int, int, int]
Placement = Tuple[int, int, Brick]  # (l, w, shape)


def orientation_key(shape: Brick) -> OrientationKey:
    """Identity of one orientation of a piece, ignoring the rotation flag."""
    return (shape.id, shape.unit_brick, shape.length, shape.width, shape.height)


class CatalogIndex:
    """
    Catalog shapes grouped by the unit brick they replace.

    Square shapes contribute one orientation and rectangular shapes two.
    Entries with a zero dimension, or whose unit brick is not 1x1x1, are
    skipped. An exclusion removes one orientation of a shape for one colour.
    """

    def __init__(
        self, catalog: Iterable[Brick], exclusions: Iterable[Exclusion] = ()
    ) -> None:
        self._by_unit: Dict[Brick, List[Brick]] = {}
        seen: Set[OrientationKey] = set()

        for brick in catalog:
            if brick.length == 0 or brick.width == 0 or brick.height == 0:
                continue
            unit = brick.unit_brick
            if not unit.is_unit:
                continue
            orientations = [brick] if brick.is_square else [brick, brick.rotate_90()]
            for shape in orientations:
                key = orientation_key(shape)
                if key in seen:
                    continue
                seen.add(key)
                self._by_unit.setdefault(unit, []).append(shape)

        self._excluded: Set[Tuple[OrientationKey, Color]] = {
            (orientation_key(shape), color) for shape, color in exclusions
        }
        self._shapes: Dict[Tuple[Brick, Color], List[Brick]] = {}

    def unit_bricks(self) -> List[Brick]:
        return list(self._by_unit)

    def orientations(self, unit_brick: Brick) -> List[Brick]:
        """Every usable orientation for unit_brick, before exclusions."""
        return list(self._by_unit.get(unit_brick, ()))

    def shapes_for(self, unit_brick: Brick, color: Color) -> Optional[List[Brick]]:
        """
        Shapes usable for a chunk of unit_brick and color, largest footprint
        first (catalog order breaks ties). None when the catalog has nothing
        for this unit brick.
        """
        if unit_brick not in self._by_unit:
            return None
        key = (unit_brick, color)
        shapes = self._shapes.get(key)
        if shapes is None:
            shapes = sorted(
                (
                    shape
                    for shape in self._by_unit[unit_brick]
                    if (orientation_key(shape), color) not in self._excluded
                ),
                key=lambda shape: -shape.area,
            )
            self._shapes[key] = shapes
        return list(shapes)


def plan_layers(total_height: int, heights: Iterable[int]) -> List[int]:
    """
    Cover total_height with as few uniform layers as possible: tallest
    available height first, shorter ones for what remains, unit layers last.
    """
    layers: List[int] = []
    remaining = max(0, int(total_height))
    for layer_height in sorted({int(k) for k in heights if int(k) > 1}, reverse=True):
        count, remaining = divmod(remaining, layer_height)
        layers.extend([layer_height] * count)
    layers.extend([1] * remaining)
    return layers


def _fits(empty: np.ndarray, l: int, w: int, shape: Brick) -> bool:
    max_l = l + shape.length
    max_w = w + shape.width
    if max_l > empty.shape[0] or max_w > empty.shape[1]:
        return False
    return bool(empty[l:max_l, w:max_w].all())


def pack_layer(
    empty: np.ndarray, shapes: Sequence[Brick]
) -> Tuple[List[Placement], np.ndarray]:
    """
    Greedily tile the True cells of a (length, width) mask.

    Rows are scanned in l order. For the first empty cell of a row, the first
    shape whose whole footprint is empty is placed with its corner on that
    cell. Cells no shape can cover are returned in the leftover mask.
    """
    empty = np.array(empty, dtype=bool, copy=True)
    leftover = np.zeros_like(empty)
    placements: List[Placement] = []

    for l in range(empty.shape[0]):
        row = empty[l]
        while row.any():
            w = int(np.argmax(row))
            for shape in shapes:
                if _fits(empty, l, w, shape):
                    empty[l : l + shape.length, w : w + shape.width] = False
                    placements.append((l, w, shape))
                    break
            else:
                row[w] = False
                leftover[l, w] = True

    return placements, leftover


def _pack_span(
    mask: np.ndarray,
    base_h: int,
    span_height: int,
    by_height: Dict[int, List[Brick]],
    out: List[ChunkBrick],
) -> None:
    h = base_h
    for layer_height in plan_layers(span_height, by_height):
        placements, leftover = pack_layer(mask, by_height.get(layer_height, ()))
        out.extend(ChunkBrick(l, w, h, shape) for l, w, shape in placements)
        if leftover.any():
            # Tall layers hand uncovered cells down to shorter shapes
            shorter = {k: v for k, v in by_height.items() if k < layer_height}
            _pack_span(leftover, h, layer_height, shorter, out)
        h += layer_height


def reduce_chunk(chunk: Chunk, shapes: Sequence[Brick]) -> Chunk:
    """
    Replace a chunk's bricks with catalog shapes covering the same voxels.
    Only the brick list changes.
    """
    by_height: Dict[int, List[Brick]] = {}
    for shape in shapes:
        if shape.height <= chunk.height:
            by_height.setdefault(shape.height, []).append(shape)

    unit_layer = by_height.setdefault(1, [])
    if chunk.unit_brick not in unit_layer:
        unit_layer.append(chunk.unit_brick)

    bricks: List[ChunkBrick] = []
    _pack_span(chunk.footprint(), 0, chunk.height, by_height, bricks)
    return chunk.with_bricks(bricks)


__all__ = [
    "orientation_key",
    "CatalogIndex",
    "plan_layers",
    "pack_layer",
    "reduce_chunk",
]
