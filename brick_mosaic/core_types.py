# brick_mosaic/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.

Axes are l, w and h (length, width, height). From above, increasing l moves
east and increasing w moves south, matching image editors and Pillow which put
the origin at the top left. Increasing h raises altitude.
"""

from dataclasses import dataclass, replace
from typing import (
    Callable,
    Hashable,
    Iterator,
    NamedTuple,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

import numpy as np
from numpy.typing import NDArray

from .constants import MAX_BRICK_DIMENSION

# Basic aliases

HexStr = str
Color = Hashable  # any hashable, equality-comparable palette colour

U8Image = NDArray[np.uint8]  # (H, W, 4)
Lab = NDArray[np.float32]  # (..., 3) CIE Lab

# Value objects


class RawColor(NamedTuple):
    """Unquantized 8-bit sRGBA colour."""

    red: int
    green: int
    blue: int
    alpha: int


@dataclass(frozen=True)
class PaletteColor:
    """Palette entry. The no-argument instance is the default colour."""

    rgba: RawColor = RawColor(0, 0, 0, 0)
    name: str = ""


@dataclass(frozen=True)
class Brick:
    """
    A rectangular piece.

    A unit brick has no unit_type and measures 1x1x1. Every other piece names
    the unit brick it can stand in for through unit_type. Rotating swaps
    length and width and flips the rotated flag.
    """

    id: str
    length: int = 1
    width: int = 1
    height: int = 1
    unit_type: Optional["Brick"] = None
    rotated: bool = False

    def __post_init__(self) -> None:
        for dim in (self.length, self.width, self.height):
            if dim < 0 or dim > MAX_BRICK_DIMENSION:
                raise ValueError(
                    f"brick {self.id!r} dimension {dim} outside 0..{MAX_BRICK_DIMENSION}"
                )

    @property
    def unit_brick(self) -> "Brick":
        return self.unit_type if self.unit_type is not None else self

    @property
    def is_unit(self) -> bool:
        return self.length == 1 and self.width == 1 and self.height == 1

    @property
    def is_square(self) -> bool:
        return self.length == self.width

    @property
    def area(self) -> int:
        return self.length * self.width

    @property
    def volume(self) -> int:
        return self.length * self.width * self.height

    def rotate_90(self) -> "Brick":
        return replace(
            self, length=self.width, width=self.length, rotated=not self.rotated
        )

    def is_rotation_of(self, other: "Brick") -> bool:
        """True when both are the same piece, whatever the orientation."""
        return self.id == other.id and self.unit_brick == other.unit_brick

    def __str__(self) -> str:
        return f"{self.id}{' (rotated)' if self.rotated else ''}"


@dataclass(frozen=True)
class PlacedBrick:
    """A brick at absolute mosaic coordinates."""

    l: int
    w: int
    h: int
    brick: Brick
    color: Color

    @property
    def length(self) -> int:
        return self.brick.length

    @property
    def width(self) -> int:
        return self.brick.width

    @property
    def height(self) -> int:
        return self.brick.height

    def voxels(self) -> Iterator[Tuple[int, int, int]]:
        """Yield every (l, w, h) the brick occupies."""
        for h in range(self.h, self.h + self.brick.height):
            for w in range(self.w, self.w + self.brick.width):
                for l in range(self.l, self.l + self.brick.length):
                    yield l, w, h


# Capabilities


@runtime_checkable
class Image(Protocol):
    """
    Raster source. Implementations provide pixel(l, w), length() and width()
    with l in [0, length) and w in [0, width). Any object with these methods
    qualifies; subclassing is optional.
    """

    def pixel(self, l: int, w: int) -> RawColor: ...

    def length(self) -> int: ...

    def width(self) -> int: ...


@runtime_checkable
class Palette(Protocol):
    """Maps a raw colour to the nearest colour of a fixed set, or None if empty."""

    def nearest(self, color: RawColor) -> Optional[Color]: ...


# Callable signatures

HeightFn = Callable[[int, int, Color], int]  # (l, w, color) -> filled height
BrickFn = Callable[[int, int, int, Color], Brick]  # (l, w, h, color) -> unit brick

Exclusion = Tuple[Brick, Color]  # (oriented shape, colour) that must not be used

# Small helpers


def hex_to_rgba(hex_str: str, alpha: int = 255) -> RawColor:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an opaque RawColor."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        s = f"#{s}"
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return RawColor(int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16), alpha)


def rgba_to_hex(rgba: RawColor) -> HexStr:
    """RGB part of a colour as a lowercase '#rrggbb' string."""
    return f"#{rgba[0]:02x}{rgba[1]:02x}{rgba[2]:02x}"


def as_raw_color(value: Union[PaletteColor, RawColor, Tuple[int, ...]]) -> RawColor:
    """
    Coerce a palette colour, RawColor or 3/4-length sequence to a RawColor.
    Missing alpha is treated as opaque.
    """
    if isinstance(value, PaletteColor):
        return value.rgba
    if isinstance(value, RawColor):
        return value
    if len(value) == 3:
        return RawColor(int(value[0]), int(value[1]), int(value[2]), 255)
    if len(value) == 4:
        return RawColor(int(value[0]), int(value[1]), int(value[2]), int(value[3]))
    raise ValueError(f"cannot interpret {value!r} as an RGBA colour")


__all__ = [
    # aliases / types
    "HexStr",
    "Color",
    "U8Image",
    "Lab",
    # value objects
    "RawColor",
    "PaletteColor",
    "Brick",
    "PlacedBrick",
    # capabilities
    "Image",
    "Palette",
    # callable signatures
    "HeightFn",
    "BrickFn",
    "Exclusion",
    # helpers
    "hex_to_rgba",
    "rgba_to_hex",
    "as_raw_color",
]
