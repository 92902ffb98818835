# brick_mosaic/chunks.py
from __future__ import annotations

"""
Chunk builder.

Finds maximal 6-connected voxel regions sharing one unit brick and one colour
inside a section slab, then cuts each region into height slices whose
footprint does not change from one level to the next.

Exports:
  ChunkBrick, Chunk
  BrickCache(brick_fn)           memoizing, validating brick selector
  assert_unit_brick(brick)
  build_chunks(length, width, max_height, height_fn, brick_fn, color_fn)
  slice_chunk(coords_by_h, unit_brick, color)
"""

from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Deque, Dict, Iterator, List, NamedTuple, Set, Tuple

import numpy as np

from .core_types import Brick, Color
from .errors import NotUnitBrickError, PointerTooSmallError

Coord = Tuple[int, int]  # (l, w)
Voxel = Tuple[int, int, int]  # (l, w, h)


class ChunkBrick(NamedTuple):
    """A brick at chunk-local coordinates."""

    l: int
    w: int
    h: int
    brick: Brick


@dataclass(frozen=True)
class Chunk:
    """
    One height slice of a connected region.

    l, w, h locate the slice inside its section. ws_included[l] lists, in
    ascending order, the local w of every included column on row l; the same
    columns are filled at every level of the slice.
    """

    unit_brick: Brick
    color: Color
    l: int
    w: int
    h: int
    length: int
    width: int
    height: int
    ws_included: Tuple[Tuple[int, ...], ...]
    bricks: Tuple[ChunkBrick, ...]

    def footprint(self) -> np.ndarray:
        """Boolean (length, width) mask of included columns."""
        mask = np.zeros((self.length, self.width), dtype=bool)
        for l, ws in enumerate(self.ws_included):
            mask[l, list(ws)] = True
        return mask

    def columns(self) -> Iterator[Coord]:
        for l, ws in enumerate(self.ws_included):
            for w in ws:
                yield l, w

    def column_count(self) -> int:
        return sum(len(ws) for ws in self.ws_included)

    def volume(self) -> int:
        return self.column_count() * self.height

    def is_degenerate(self) -> bool:
        return self.length <= 0 or self.width <= 0 or self.height <= 0

    def with_bricks(self, bricks: List[ChunkBrick]) -> "Chunk":
        return replace(self, bricks=tuple(bricks))


def assert_unit_brick(brick: Brick) -> Brick:
    """Return brick if it measures 1x1x1, else raise NotUnitBrickError."""
    if (
        getattr(brick, "length", None) == 1
        and getattr(brick, "width", None) == 1
        and getattr(brick, "height", None) == 1
    ):
        return brick
    raise NotUnitBrickError(brick)


class BrickCache:
    """
    Wraps a brick selector so it runs at most once per (l, w, h) and only ever
    hands out unit bricks.
    """

    def __init__(self, brick_fn: Callable[[int, int, int, Color], Brick]) -> None:
        self._brick_fn = brick_fn
        self._cache: Dict[Voxel, Brick] = {}

    def __call__(self, l: int, w: int, h: int, color: Color) -> Brick:
        key = (l, w, h)
        brick = self._cache.get(key)
        if brick is None:
            brick = assert_unit_brick(self._brick_fn(l, w, h, color))
            self._cache[key] = brick
        return brick

    def __len__(self) -> int:
        return len(self._cache)


def _allocate_visited(length: int, width: int, height: int) -> np.ndarray:
    size = length * width * height
    if size > np.iinfo(np.intp).max:
        raise PointerTooSmallError(length, width, height)
    try:
        return np.zeros(size, dtype=bool)
    except (MemoryError, ValueError) as exc:
        raise PointerTooSmallError(length, width, height) from exc


def build_chunks(
    length: int,
    width: int,
    max_height: int,
    height_fn: Callable[[int, int], int],
    brick_fn: Callable[[int, int, int, Color], Brick],
    color_fn: Callable[[int, int], Color],
) -> List[Chunk]:
    """
    Decompose one section slab into chunks.

    height_fn(l, w) is the number of filled voxels in column (l, w), clamped
    to [0, max_height]. brick_fn must return unit bricks; wrap it in
    BrickCache to call the underlying selector once per voxel.

    Seeds are scanned w outer, l inner, h ascending and each region is
    explored breadth first, so the output order is deterministic.
    """
    if length <= 0 or width <= 0 or max_height <= 0:
        return []

    visited = _allocate_visited(length, width, max_height)
    plane = length * width

    def column_height(l: int, w: int) -> int:
        return min(max_height, max(0, int(height_fn(l, w))))

    def index(l: int, w: int, h: int) -> int:
        return h * plane + w * length + l

    chunks: List[Chunk] = []
    to_visit: Deque[Voxel] = deque()

    for start_w in range(width):
        for start_l in range(length):
            start_height = column_height(start_l, start_w)

            for start_h in range(start_height):
                if visited[index(start_l, start_w, start_h)]:
                    continue

                start_color = color_fn(start_l, start_w)
                start_brick = assert_unit_brick(
                    brick_fn(start_l, start_w, start_h, start_color)
                )

                def is_new(l: int, w: int, h: int) -> bool:
                    if visited[index(l, w, h)]:
                        return False
                    color = color_fn(l, w)
                    if color != start_color:
                        return False
                    return brick_fn(l, w, h, color) == start_brick

                coords_by_h: Dict[int, Set[Coord]] = {}
                to_visit.append((start_l, start_w, start_h))

                while to_visit:
                    l, w, h = to_visit.popleft()

                    # A voxel can be queued by several neighbours
                    i = index(l, w, h)
                    if visited[i]:
                        continue
                    visited[i] = True
                    coords_by_h.setdefault(h, set()).add((l, w))

                    # west, east, south, north
                    if l > 0 and column_height(l - 1, w) > h and is_new(l - 1, w, h):
                        to_visit.append((l - 1, w, h))
                    if (
                        l < length - 1
                        and column_height(l + 1, w) > h
                        and is_new(l + 1, w, h)
                    ):
                        to_visit.append((l + 1, w, h))
                    if w > 0 and column_height(l, w - 1) > h and is_new(l, w - 1, h):
                        to_visit.append((l, w - 1, h))
                    if (
                        w < width - 1
                        and column_height(l, w + 1) > h
                        and is_new(l, w + 1, h)
                    ):
                        to_visit.append((l, w + 1, h))

                    # below, above
                    if h > 0 and is_new(l, w, h - 1):
                        to_visit.append((l, w, h - 1))
                    if h < column_height(l, w) - 1 and is_new(l, w, h + 1):
                        to_visit.append((l, w, h + 1))

                chunks.extend(slice_chunk(coords_by_h, start_brick, start_color))

    return chunks


def _make_slice(
    coords: Set[Coord], h: int, height: int, unit_brick: Brick, color: Color
) -> Chunk:
    min_l = min(l for l, _ in coords)
    max_l = max(l for l, _ in coords)
    min_w = min(w for _, w in coords)
    max_w = max(w for _, w in coords)
    length = max_l - min_l + 1

    ws_included: List[List[int]] = [[] for _ in range(length)]
    bricks: List[ChunkBrick] = []
    for l, w in sorted(coords):
        rel_l = l - min_l
        rel_w = w - min_w
        ws_included[rel_l].append(rel_w)
        for rel_h in range(height):
            bricks.append(ChunkBrick(rel_l, rel_w, rel_h, unit_brick))

    return Chunk(
        unit_brick=unit_brick,
        color=color,
        l=min_l,
        w=min_w,
        h=h,
        length=length,
        width=max_w - min_w + 1,
        height=height,
        ws_included=tuple(tuple(ws) for ws in ws_included),
        bricks=tuple(bricks),
    )


def slice_chunk(
    coords_by_h: Dict[int, Set[Coord]], unit_brick: Brick, color: Color
) -> List[Chunk]:
    """
    Cut an explored region into slices of constant footprint.

    A new slice starts whenever the set of (l, w) columns at level h differs
    from level h - 1. Each slice gets its own bounding box.
    """
    slices: List[Chunk] = []
    run_h = 0
    run_height = 0
    run_coords: Set[Coord] = set()

    for h in sorted(coords_by_h):
        coords = coords_by_h[h]
        if not coords:
            continue
        if run_height and coords == run_coords and h == run_h + run_height:
            run_height += 1
            continue
        if run_height:
            slices.append(_make_slice(run_coords, run_h, run_height, unit_brick, color))
        run_h, run_height, run_coords = h, 1, coords

    if run_height:
        slices.append(_make_slice(run_coords, run_h, run_height, unit_brick, color))

    return slices


__all__ = [
    "ChunkBrick",
    "Chunk",
    "BrickCache",
    "assert_unit_brick",
    "build_chunks",
    "slice_chunk",
]
