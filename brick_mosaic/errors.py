# brick_mosaic/errors.py
from __future__ import annotations

"""
Errors raised while building a mosaic.

Both are fatal for the call that raises them: no partial mosaic is returned.
"""

from typing import Any


class MosaicError(Exception):
    """Base class for mosaic construction failures."""


class NotUnitBrickError(MosaicError):
    """A brick selector returned something other than a 1x1x1 unit brick."""

    def __init__(self, brick: Any) -> None:
        super().__init__(f"not a unit brick: {brick!r}")
        self.brick = brick


class PointerTooSmallError(MosaicError):
    """A section's voxel index would not fit the platform's addressable range."""

    def __init__(self, length: int, width: int, height: int) -> None:
        super().__init__(
            f"cannot index {length}x{width}x{height} voxels on this platform"
        )
        self.length = length
        self.width = width
        self.height = height


__all__ = ["MosaicError", "NotUnitBrickError", "PointerTooSmallError"]
