# brick_mosaic/catalog.py
from __future__ import annotations

"""
Built-in catalog of standard plates and bricks.

Every piece stands in for PLATE_1X1, the unit voxel. Heights are counted in
plates, so a brick is three voxels tall. Each piece is listed once; the
reducer adds the rotated orientation of rectangular pieces itself.

Exports:
  PLATE_1X1
  PLATES, BRICKS, STANDARD_CATALOG
  CATALOGS: dict[str, list[Brick]]
  catalog_by_name(name)
  find_piece(piece_id, catalog=STANDARD_CATALOG)
"""

from typing import Dict, List, Optional, Tuple

from .core_types import Brick

PLATE_1X1 = Brick("Plate 1x1")

PLATE_HEIGHT = 1
BRICK_HEIGHT = 3

# (length, width) footprints in studs
PLATE_SIZES: List[Tuple[int, int]] = [
    (1, 2),
    (1, 3),
    (1, 4),
    (1, 6),
    (1, 8),
    (2, 2),
    (2, 3),
    (2, 4),
    (2, 6),
    (2, 8),
    (4, 4),
    (4, 6),
    (4, 8),
    (6, 6),
]

BRICK_SIZES: List[Tuple[int, int]] = [
    (1, 1),
    (1, 2),
    (1, 3),
    (1, 4),
    (1, 6),
    (1, 8),
    (2, 2),
    (2, 3),
    (2, 4),
    (2, 6),
]


def _pieces(kind: str, sizes: List[Tuple[int, int]], height: int) -> List[Brick]:
    return [
        Brick(
            f"{kind} {length}x{width}",
            length=length,
            width=width,
            height=height,
            unit_type=PLATE_1X1,
        )
        for length, width in sizes
    ]


PLATES: List[Brick] = _pieces("Plate", PLATE_SIZES, PLATE_HEIGHT)
BRICKS: List[Brick] = _pieces("Brick", BRICK_SIZES, BRICK_HEIGHT)
STANDARD_CATALOG: List[Brick] = PLATES + BRICKS

CATALOGS: Dict[str, List[Brick]] = {
    "unit": [],
    "plates": PLATES,
    "bricks": BRICKS,
    "standard": STANDARD_CATALOG,
}


def catalog_by_name(name: str) -> List[Brick]:
    """Look up a built-in catalog; 'unit' is empty and keeps 1x1 plates."""
    try:
        return list(CATALOGS[name])
    except KeyError:
        raise ValueError(
            f"unknown catalog {name!r}; choose from {', '.join(sorted(CATALOGS))}"
        ) from None


def find_piece(
    piece_id: str, catalog: Optional[List[Brick]] = None
) -> Brick:
    """
    Find a catalog piece by id, case-insensitively. A trailing 'r' on the
    footprint ('Plate 1x2r') asks for the rotated orientation.
    """
    pieces = STANDARD_CATALOG if catalog is None else catalog
    wanted = piece_id.strip().lower()
    rotated = wanted.endswith("r")
    if rotated:
        wanted = wanted[:-1].rstrip()
    for piece in pieces:
        if piece.id.lower() == wanted:
            return piece.rotate_90() if rotated else piece
    raise ValueError(f"unknown piece {piece_id!r}")


__all__ = [
    "PLATE_1X1",
    "PLATE_HEIGHT",
    "BRICK_HEIGHT",
    "PLATES",
    "BRICKS",
    "STANDARD_CATALOG",
    "CATALOGS",
    "catalog_by_name",
    "find_piece",
]
