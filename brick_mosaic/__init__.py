# brick_mosaic/__init__.py
"""
brick_mosaic package.

Purpose:
  Turn an image plus per-pixel height and brick rules into brick placements.
  See brick_mosaic.cli for the command line front end.

Public API:
  Mosaic        : from_image(...) builds a voxel mosaic, reduce_bricks(...)
                  swaps in larger catalog pieces, iter() yields placements.
  Brick         : a piece; unit bricks are 1x1x1.
  PlacedBrick   : a piece at mosaic coordinates with its colour.
  errors        : MosaicError, NotUnitBrickError, PointerTooSmallError.
  palette       : EuclideanDistancePalette, Ciede2000Palette, HyAbPalette.
  palette_data  : built-in LEGO colours.
  catalog       : built-in plates and bricks.
  image_io      : Pillow loading and the ArrayImage adapter.

Quick start:
  from brick_mosaic import Mosaic, EuclideanDistancePalette
  from brick_mosaic.catalog import PLATE_1X1, STANDARD_CATALOG
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import catalog
from . import colour_convert
from . import core_types
from . import errors
from . import image_io
from . import palette
from . import palette_data
from . import utils

from .core_types import Brick, PaletteColor, PlacedBrick, RawColor  # noqa: E402
from .errors import (  # noqa: E402
    MosaicError,
    NotUnitBrickError,
    PointerTooSmallError,
)
from .image_io import ArrayImage  # noqa: E402
from .mosaic import Mosaic, Section  # noqa: E402
from .palette import (  # noqa: E402
    Ciede2000Palette,
    EuclideanDistancePalette,
    HyAbPalette,
)

__all__ = [
    "__version__",
    "catalog",
    "colour_convert",
    "core_types",
    "errors",
    "image_io",
    "palette",
    "palette_data",
    "utils",
    "Brick",
    "PaletteColor",
    "PlacedBrick",
    "RawColor",
    "MosaicError",
    "NotUnitBrickError",
    "PointerTooSmallError",
    "ArrayImage",
    "Mosaic",
    "Section",
    "Ciede2000Palette",
    "EuclideanDistancePalette",
    "HyAbPalette",
]
