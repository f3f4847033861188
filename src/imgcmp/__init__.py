"""Pixel-wise image comparison for visual regression checks."""

from __future__ import annotations

from .compare import ComparisonResult, compare_images, count_allowed_mismatches
from .errors import (
    DimensionMismatchError,
    ImageLoadError,
    ImageSaveError,
    ImgcmpError,
    UnsupportedImageError,
)
from .presets import CompareParams, DiffStyle, PixelAllowance, get_preset, iter_presets

__all__ = [
    "compare_images",
    "count_allowed_mismatches",
    "ComparisonResult",
    "CompareParams",
    "DiffStyle",
    "PixelAllowance",
    "get_preset",
    "iter_presets",
    "ImgcmpError",
    "ImageLoadError",
    "ImageSaveError",
    "DimensionMismatchError",
    "UnsupportedImageError",
    "utils",
]

__version__ = "0.1.0"
