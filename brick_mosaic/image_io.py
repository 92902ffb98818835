# brick_mosaic/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import Image as MosaicImage
from .core_types import RawColor, U8Image

"""
Image I/O helpers (RGBA in sRGB), resizing, and an array-backed mosaic image.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


class ArrayImage(MosaicImage):
    """
    Mosaic image over an (H, W, 4) uint8 RGBA array.

    Image columns run along l and rows along w, so length is the pixel width
    and width is the pixel height.
    """

    def __init__(self, rgba: np.ndarray) -> None:
        arr = np.asarray(rgba, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[-1] != 4:
            raise ValueError(f"expected an (H, W, 4) RGBA array, got {arr.shape}")
        self.rgba: U8Image = arr

    def pixel(self, l: int, w: int) -> RawColor:
        r, g, b, a = self.rgba[w, l]
        return RawColor(int(r), int(g), int(b), int(a))

    def length(self) -> int:
        return int(self.rgba.shape[1])

    def width(self) -> int:
        return int(self.rgba.shape[0])


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def load_image_rgba(path: Path) -> U8Image:
    """Read any Pillow image as an (H, W, 4) uint8 sRGBA array."""
    with Image.open(path) as im0:
        im = _convert_to_srgb_rgba(im0)
    return np.array(im, dtype=np.uint8)


def resize_rgba_height(
    rgba: U8Image, dst_h: Optional[int], resample: Image.Resampling
) -> U8Image:
    """Scale down so height <= dst_h, keeping the aspect ratio. Never upscales."""
    H0, W0, _ = rgba.shape
    if dst_h is None or dst_h <= 0 or dst_h >= H0:
        return rgba

    dst_w = max(1, int(round(W0 * (dst_h / float(H0)))))
    im = Image.fromarray(np.ascontiguousarray(rgba))
    im2 = im.resize((dst_w, dst_h), resample=resample)
    return np.array(im2, dtype=np.uint8)


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "ArrayImage",
    "load_image_rgba",
    "resize_rgba_height",
    "is_image_file",
]
