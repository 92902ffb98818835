# brick_mosaic/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PALETTE: list[tuple[str, str]]  # [(hex, name), ...] solid LEGO colours
  build_palette(hex_name_pairs=PALETTE) -> list[PaletteColor]
"""

from typing import List, Tuple

from .core_types import PaletteColor, hex_to_rgba


PALETTE: List[Tuple[str, str]] = [
    ("#05131d", "Black"),
    ("#0055bf", "Blue"),
    ("#237841", "Green"),
    ("#008f9b", "Dark Turquoise"),
    ("#c91a09", "Red"),
    ("#c870a0", "Dark Pink"),
    ("#583927", "Brown"),
    ("#9ba19d", "Light Gray"),
    ("#6d6e5c", "Dark Gray"),
    ("#b4d2e3", "Light Blue"),
    ("#4b9f4a", "Bright Green"),
    ("#55a5af", "Light Turquoise"),
    ("#f2705e", "Salmon"),
    ("#fc97ac", "Pink"),
    ("#f2cd37", "Yellow"),
    ("#ffffff", "White"),
    ("#c2dab8", "Light Green"),
    ("#fbe696", "Light Yellow"),
    ("#e4cd9e", "Tan"),
    ("#c9cae2", "Light Violet"),
    ("#81007b", "Purple"),
    ("#2032b0", "Dark Blue-Violet"),
    ("#fe8a18", "Orange"),
    ("#923978", "Magenta"),
    ("#bbe90b", "Lime"),
    ("#958a73", "Dark Tan"),
    ("#e4adc8", "Bright Pink"),
    ("#ac78ba", "Medium Lavender"),
    ("#e1d5ed", "Lavender"),
    ("#f3cf9b", "Very Light Orange"),
    ("#cd6298", "Light Purple"),
    ("#582a12", "Reddish Brown"),
    ("#a0a5a9", "Light Bluish Gray"),
    ("#6c6e68", "Dark Bluish Gray"),
    ("#5a93db", "Medium Blue"),
    ("#73dca1", "Medium Green"),
    ("#f6d7b3", "Light Nougat"),
    ("#cc702a", "Medium Nougat"),
    ("#3f3691", "Medium Violet"),
    ("#7c503a", "Medium Brown"),
    ("#4c61db", "Medium Bluish Violet"),
    ("#0a3463", "Dark Blue"),
    ("#184632", "Dark Green"),
    ("#720e0f", "Dark Red"),
    ("#36aebf", "Medium Azure"),
    ("#f8bb3d", "Bright Light Orange"),
    ("#dfeea5", "Yellowish Green"),
    ("#aa7d55", "Medium Tan"),
    ("#352100", "Dark Brown"),
    ("#a95500", "Dark Orange"),
    ("#ffa70b", "Medium Orange"),
    ("#ad6140", "Nougat"),
    ("#a0bcac", "Sand Green"),
    ("#6074a1", "Sand Blue"),
    ("#9391e4", "Light Lilac"),
    ("#078bc9", "Dark Azure"),
    ("#9fc3e9", "Bright Light Blue"),
    ("#fff03a", "Bright Light Yellow"),
]


def build_palette(
    hex_name_pairs: List[Tuple[str, str]] = PALETTE,
) -> List[PaletteColor]:
    """Convert a list of (hex, name) into opaque PaletteColor entries."""
    return [PaletteColor(rgba=hex_to_rgba(hx), name=name) for hx, name in hex_name_pairs]


__all__ = ["PALETTE", "build_palette"]
