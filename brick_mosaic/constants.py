# brick_mosaic/constants.py
"""
Global tunables used across the project.

- Sectioning limits (SECTION_SIZE, MAX_BRICK_DIMENSION)
- Palette distance weights (LAB_*)
- CLI defaults (DEFAULT_*)
"""
from __future__ import annotations

# ==========
# Sectioning
# ==========
# Tiles and height slabs never exceed this many voxels per axis, which keeps
# every section-local coordinate within one byte and bounds the visited set of
# a single flood fill to SECTION_SIZE ** 3 voxels.
SECTION_SIZE: int = 255
MAX_BRICK_DIMENSION: int = 255

# =======================
# Palette distance (LAB_*)
# =======================
# Lab ignores alpha, so alpha is blended in on the same 0..100 scale.
LAB_COLOUR_WEIGHT: float = 0.75
LAB_ALPHA_WEIGHT: float = 0.25
LAB_ALPHA_SCALE: float = 100.0

# ============
# CLI defaults
# ============
DEFAULT_DEPTH: int = 1
DEFAULT_PALETTE: str = "euclidean"
DEFAULT_CATALOG: str = "plates"
