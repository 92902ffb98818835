# brick_mosaic/pixels.py
from __future__ import annotations

"""
Dense per-pixel buffers for one section.

Every value is computed once up front, so callbacks run exactly once per pixel
no matter how often the flood fill revisits a column.
"""

from typing import Any, Callable, Optional

import numpy as np

from .core_types import Color, Palette, RawColor


class Pixels:
    """A (length, width) grid of values indexed as value(l, w)."""

    def __init__(self, values: np.ndarray) -> None:
        if values.ndim != 2:
            raise ValueError(f"expected a 2D buffer, got shape {values.shape}")
        self.values = values

    @classmethod
    def from_fn(
        cls,
        fn: Callable[[int, int], Any],
        length: int,
        width: int,
        dtype: Any = object,
    ) -> "Pixels":
        """Fill a buffer by calling fn(l, w) once per cell, rows of w in order."""
        values = np.empty((length, width), dtype=dtype)
        for w in range(width):
            for l in range(length):
                values[l, w] = fn(l, w)
        return cls(values)

    @property
    def length(self) -> int:
        return int(self.values.shape[0])

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    def value(self, l: int, w: int) -> Any:
        return self.values[l, w]

    def max(self) -> int:
        """Largest value, or 0 for an empty buffer."""
        if self.values.size == 0:
            return 0
        return int(self.values.max())

    def with_palette(self, palette: Palette, default_color: Color) -> "Pixels":
        """
        Quantize raw colours, calling palette.nearest exactly once per pixel.
        Pixels the palette cannot match (empty palette) get default_color.
        """
        out = np.empty(self.values.shape, dtype=object)
        for w in range(self.width):
            for l in range(self.length):
                nearest: Optional[Color] = palette.nearest(self.values[l, w])
                out[l, w] = default_color if nearest is None else nearest
        return Pixels(out)


def raw_pixels(image: Any, l0: int, w0: int, length: int, width: int) -> Pixels:
    """Cache image.pixel for the window [l0, l0+length) x [w0, w0+width)."""

    def _read(l: int, w: int) -> RawColor:
        return RawColor(*image.pixel(l + l0, w + w0))

    return Pixels.from_fn(_read, length, width)


__all__ = ["Pixels", "raw_pixels"]
