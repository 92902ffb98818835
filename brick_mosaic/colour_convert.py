# brick_mosaic/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics (D65).

Exports:
  rgb_to_linear(srgb)
  rgba_to_linear(rgba_u8)
  rgb_to_lab(rgb_u8)
  delta_e2000_pair(lab1, lab2)
  delta_e2000_vec(src_lab, cand_lab)
  hyab_vec(src_lab, cand_lab)
"""

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .core_types import Lab


# sRGB to linear


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Returns float32 with the input's shape.
    """
    srgb_f = np.asarray(srgb, dtype=np.float32)
    with np.errstate(invalid="ignore"):
        linear = np.where(
            srgb_f <= 0.04045, srgb_f / 12.92, ((srgb_f + 0.055) / 1.055) ** 2.4
        )
    return linear.astype(np.float32, copy=False)


def rgba_to_linear(rgba_u8: np.ndarray) -> NDArray[np.float64]:
    """
    8-bit sRGBA [...,4] to linear RGBA in 0..1. Alpha is already linear and
    is only rescaled. Returns float64 so squared distances stay exact enough
    for nearest-neighbour ties.
    """
    arr = np.asarray(rgba_u8, dtype=np.float64) / 255.0
    out = np.empty(arr.shape, dtype=np.float64)
    out[..., :3] = rgb_to_linear(arr[..., :3])
    out[..., 3] = arr[..., 3]
    return out


# sRGB to Lab (D65)


def rgb_to_lab(rgb_u8: np.ndarray) -> Lab:
    """
    8-bit sRGB [...,3] (extra channels ignored) to CIE Lab (D65).
    Returns float32 with shape (..., 3).
    """
    rgb_f = np.asarray(rgb_u8, dtype=np.float32)[..., :3] / 255.0

    r_lin = rgb_to_linear(rgb_f[..., 0])
    g_lin = rgb_to_linear(rgb_f[..., 1])
    b_lin = rgb_to_linear(rgb_f[..., 2])

    # Linear RGB -> XYZ (D65)
    X = 0.4124564 * r_lin + 0.3575761 * g_lin + 0.1804375 * b_lin
    Y = 0.2126729 * r_lin + 0.7151522 * g_lin + 0.0721750 * b_lin
    Z = 0.0193339 * r_lin + 0.1191920 * g_lin + 0.9503041 * b_lin

    # Reference white (D65)
    Xn, Yn, Zn = 0.95047, 1.00000, 1.08883
    x, y, z = X / Xn, Y / Yn, Z / Zn
    e, k = 216.0 / 24389.0, 24389.0 / 27.0

    def f(t: np.ndarray) -> np.ndarray:
        with np.errstate(invalid="ignore"):
            return np.where(t > e, np.cbrt(t), (k * t + 16.0) / 116.0).astype(
                np.float32, copy=False
            )

    fx, fy, fz = f(x), f(y), f(z)
    out = np.empty(rgb_f.shape, dtype=np.float32)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


# CIEDE2000


def delta_e2000_pair(
    lab1: Sequence[float] | NDArray[np.floating],
    lab2: Sequence[float] | NDArray[np.floating],
) -> float:
    """
    CIEDE2000 distance between two Lab colours.
    Scalar reference implementation.
    """
    L1, a1, b1 = float(lab1[0]), float(lab1[1]), float(lab1[2])
    L2, a2, b2 = float(lab2[0]), float(lab2[1]), float(lab2[2])

    C1 = math.hypot(a1, b1)
    C2 = math.hypot(a2, b2)
    C_bar = 0.5 * (C1 + C2)
    G = 0.5 * (1.0 - math.sqrt((C_bar**7) / (C_bar**7 + 25.0**7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = math.hypot(a1p, b1)
    C2p = math.hypot(a2p, b2)

    def _hue(a_val: float, b_val: float) -> float:
        if a_val == 0.0 and b_val == 0.0:
            return 0.0
        ang = math.degrees(math.atan2(b_val, a_val))
        return ang + 360.0 if ang < 0.0 else ang

    h1p = _hue(a1p, b1)
    h2p = _hue(a2p, b2)

    dLp = L2 - L1
    dCp = C2p - C1p

    dhp = h2p - h1p
    if C1p * C2p == 0.0:
        dhp = 0.0
    elif dhp > 180.0:
        dhp -= 360.0
    elif dhp < -180.0:
        dhp += 360.0

    dHp = 2.0 * math.sqrt(C1p * C2p) * math.sin(math.radians(dhp / 2.0))

    L_bar = 0.5 * (L1 + L2)
    C_bar_p = 0.5 * (C1p + C2p)

    if C1p * C2p == 0.0:
        h_bar_p = h1p + h2p
    else:
        h_sum = h1p + h2p
        if abs(h1p - h2p) <= 180.0:
            h_bar_p = 0.5 * h_sum
        elif h_sum < 360.0:
            h_bar_p = 0.5 * (h_sum + 360.0)
        else:
            h_bar_p = 0.5 * (h_sum - 360.0)

    T = (
        1.0
        - 0.17 * math.cos(math.radians(h_bar_p - 30.0))
        + 0.24 * math.cos(math.radians(2.0 * h_bar_p))
        + 0.32 * math.cos(math.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * math.cos(math.radians(4.0 * h_bar_p - 63.0))
    )

    d_theta = 30.0 * math.exp(-(((h_bar_p - 275.0) / 25.0) ** 2.0))
    R_c = 2.0 * math.sqrt((C_bar_p**7) / (C_bar_p**7 + 25.0**7))

    S_l = 1.0 + (0.015 * ((L_bar - 50.0) ** 2.0)) / math.sqrt(
        20.0 + ((L_bar - 50.0) ** 2.0)
    )
    S_c = 1.0 + 0.045 * C_bar_p
    S_h = 1.0 + 0.015 * C_bar_p * T
    R_t = -math.sin(math.radians(2.0 * d_theta)) * R_c

    dE = math.sqrt(
        (dLp / S_l) ** 2
        + (dCp / S_c) ** 2
        + (dHp / S_h) ** 2
        + R_t * (dCp / S_c) * (dHp / S_h)
    )
    return float(dE)


def delta_e2000_vec(src_lab: Lab, cand_lab: Lab) -> NDArray[np.float32]:
    """
    Row-wise CIEDE2000 for one source Lab vs many candidate Labs.

    Args:
      src_lab: Lab [3]
      cand_lab: Lab [N,3]
    Returns:
      float32 array [N]
    """
    s = np.asarray(src_lab, dtype=np.float32)
    cands = np.asarray(cand_lab, dtype=np.float32).reshape(-1, 3)
    out = np.empty((cands.shape[0],), dtype=np.float32)
    for i in range(cands.shape[0]):
        out[i] = delta_e2000_pair(s, cands[i])
    return out


def hyab_vec(src_lab: Lab, cand_lab: Lab) -> NDArray[np.float32]:
    """HyAB distance |dL| + sqrt(da^2 + db^2), one source vs many candidates."""
    s = np.asarray(src_lab, dtype=np.float32).reshape(3)
    cands = np.asarray(cand_lab, dtype=np.float32).reshape(-1, 3)
    d = cands - s
    return (np.abs(d[:, 0]) + np.hypot(d[:, 1], d[:, 2])).astype(np.float32, copy=False)


__all__ = [
    "rgb_to_linear",
    "rgba_to_linear",
    "rgb_to_lab",
    "delta_e2000_pair",
    "delta_e2000_vec",
    "hyab_vec",
]
