# brick_mosaic/palette.py
from __future__ import annotations

"""
Nearest-colour palettes.

Every palette answers nearest(raw) with one of its own PaletteColor entries,
or None when they hold no colours at all.

Exports:
  EuclideanDistancePalette(colors)  k-d tree in linear sRGBA
  Ciede2000Palette(colors)          CIEDE2000 in Lab, alpha blended in
  HyAbPalette(colors)               HyAB in Lab, alpha blended in
  make_palette(kind, colors)
"""

from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
from scipy.spatial import KDTree

from .colour_convert import delta_e2000_vec, hyab_vec, rgb_to_lab, rgba_to_linear
from .constants import LAB_ALPHA_SCALE, LAB_ALPHA_WEIGHT, LAB_COLOUR_WEIGHT
from .core_types import Lab, Palette, PaletteColor, RawColor, as_raw_color

ColourLike = Union[PaletteColor, RawColor, Sequence[int]]


def _as_palette_colours(colors: Iterable[ColourLike]) -> List[PaletteColor]:
    out: List[PaletteColor] = []
    for c in colors:
        out.append(c if isinstance(c, PaletteColor) else PaletteColor(as_raw_color(c)))
    return out


def _rgba_array(colors: Sequence[PaletteColor]) -> np.ndarray:
    return np.array([list(c.rgba) for c in colors], dtype=np.uint8).reshape(-1, 4)


class EuclideanDistancePalette(Palette):
    """
    Straight-line distance between colours after converting sRGB to linear
    light. Alpha is already linear and only rescaled to 0..1.
    """

    def __init__(self, colors: Iterable[ColourLike]) -> None:
        self.colors: List[PaletteColor] = _as_palette_colours(colors)
        self._tree: Optional[KDTree] = None
        if self.colors:
            self._tree = KDTree(rgba_to_linear(_rgba_array(self.colors)))

    def nearest(self, color: RawColor) -> Optional[PaletteColor]:
        if self._tree is None:
            return None
        point = rgba_to_linear(np.array(as_raw_color(color), dtype=np.uint8))
        _, idx = self._tree.query(point)
        return self.colors[int(idx)]

    def __len__(self) -> int:
        return len(self.colors)


class _LabPalette(Palette):
    """
    Shared scoring for palettes that compare in Lab. Lab has no alpha, so the
    score is
      LAB_COLOUR_WEIGHT * distance + LAB_ALPHA_WEIGHT * |d alpha| * LAB_ALPHA_SCALE
    with alpha in 0..1. The first entry wins ties.
    """

    def __init__(self, colors: Iterable[ColourLike]) -> None:
        self.colors: List[PaletteColor] = _as_palette_colours(colors)
        rgba = _rgba_array(self.colors)
        self._lab = rgb_to_lab(rgba).reshape(-1, 3)
        self._alpha = rgba[:, 3].astype(np.float32) / 255.0

    def _distance(self, src_lab: Lab, cand_lab: Lab) -> np.ndarray:
        raise NotImplementedError

    def nearest(self, color: RawColor) -> Optional[PaletteColor]:
        if not self.colors:
            return None
        raw = as_raw_color(color)
        src_lab = rgb_to_lab(np.array(raw, dtype=np.uint8))
        score = lab_alpha_score(
            self._distance(src_lab, self._lab), self._alpha, raw.alpha / 255.0
        )
        return self.colors[int(np.argmin(score))]

    def __len__(self) -> int:
        return len(self.colors)


def lab_alpha_score(
    lab_distance: np.ndarray, cand_alpha: np.ndarray, src_alpha: float
) -> np.ndarray:
    """Blend a Lab distance with the alpha difference (both per candidate)."""
    d_alpha = np.abs(cand_alpha - src_alpha)
    return (
        LAB_COLOUR_WEIGHT * lab_distance + LAB_ALPHA_WEIGHT * d_alpha * LAB_ALPHA_SCALE
    )


class Ciede2000Palette(_LabPalette):
    """CIEDE2000 distance in Lab, alpha blended in."""

    def _distance(self, src_lab: Lab, cand_lab: Lab) -> np.ndarray:
        return delta_e2000_vec(src_lab, cand_lab)


class HyAbPalette(_LabPalette):
    """HyAB distance in Lab, |dL| + sqrt(da^2 + db^2), alpha blended in."""

    def _distance(self, src_lab: Lab, cand_lab: Lab) -> np.ndarray:
        return hyab_vec(src_lab, cand_lab)


def make_palette(kind: str, colors: Iterable[ColourLike]) -> Palette:
    """Build a palette by name: 'euclidean', 'ciede2000' or 'hyab'."""
    if kind == "euclidean":
        return EuclideanDistancePalette(colors)
    if kind == "ciede2000":
        return Ciede2000Palette(colors)
    if kind == "hyab":
        return HyAbPalette(colors)
    raise ValueError(f"unknown palette kind: {kind!r}")


__all__ = [
    "EuclideanDistancePalette",
    "Ciede2000Palette",
    "HyAbPalette",
    "lab_alpha_score",
    "make_palette",
]
