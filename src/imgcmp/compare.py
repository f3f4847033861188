"""Pixel-wise image comparison.

Two pixel grids are compared channel by channel. For every pixel the largest
absolute channel difference, normalised to ``[0, 1]`` by the maximum value of
the pixel type, is checked against ``threshold``; the pixel mismatches when
that difference is strictly greater than the threshold. The images match when
no more than ``allowed_mismatches`` pixels mismatch (zero by default).

Channel alignment when the layouts differ:

* alpha is compared only when both images carry it, otherwise it is dropped;
* a greyscale image compared with a colour one has its grey value replicated
  into R, G and B.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

import numpy as np

from .errors import DimensionMismatchError
from .presets import DiffStyle, PixelAllowance
from .utils.image_io import PixelSource, as_pixel_grid

logger = logging.getLogger(__name__)

Allowance = Union[int, PixelAllowance]


@dataclass(frozen=True)
class ComparisonResult:
    matches: bool
    mismatch_ratio: float
    mismatched_pixels: int
    total_pixels: int
    width: int
    height: int
    channels: int
    threshold: float
    allowed_mismatches: int
    max_difference: float
    diff_image: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "matches": self.matches,
            "mismatch_ratio": self.mismatch_ratio,
            "mismatched_pixels": self.mismatched_pixels,
            "total_pixels": self.total_pixels,
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "threshold": self.threshold,
            "allowed_mismatches": self.allowed_mismatches,
            "max_difference": self.max_difference,
        }


def count_allowed_mismatches(allowance: Allowance, width: int, height: int) -> int:
    """Return how many mismatched pixels ``allowance`` tolerates for a ``width`` x ``height`` image."""

    if isinstance(allowance, PixelAllowance):
        count = allowance.resolve(width, height)
    else:
        count = int(allowance)
    if count < 0:
        raise ValueError("The pixel allowance cannot be negative")
    return count


def compare_images(
    image_a: PixelSource,
    image_b: PixelSource,
    threshold: float = 0.0,
    want_diff_image: bool = False,
    *,
    allowed_mismatches: Allowance = 0,
    style: DiffStyle | None = None,
) -> ComparisonResult:
    """Compare ``image_a`` with ``image_b`` pixel by pixel.

    Raises :class:`DimensionMismatchError` when the images differ in width or
    height and ``ValueError`` when ``threshold`` lies outside ``[0, 1]``.
    ``diff_image`` is only rendered when ``want_diff_image`` is true; it is an
    8-bit RGB array styled according to ``style``.
    """

    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Threshold {threshold} must be between 0 and 1")

    grid_a = as_pixel_grid(image_a)
    grid_b = as_pixel_grid(image_b)

    size_a = (grid_a.shape[1], grid_a.shape[0])
    size_b = (grid_b.shape[1], grid_b.shape[0])
    if size_a != size_b:
        raise DimensionMismatchError(size_a, size_b)

    width, height = size_a
    total = width * height
    allowed = count_allowed_mismatches(allowed_mismatches, width, height)

    aligned_a, aligned_b = _align_channels(grid_a, grid_b)
    channel_diff = _channel_differences(aligned_a, aligned_b)
    metric = channel_diff.max(axis=2)
    mismatched = metric > threshold

    mismatch_count = int(np.count_nonzero(mismatched))
    mismatch_ratio = mismatch_count / total if total else 0.0
    max_difference = float(metric.max()) if total else 0.0

    diff_image = None
    if want_diff_image:
        diff_image = _render_diff(grid_a, channel_diff, mismatched, threshold, style or DiffStyle())

    logger.debug(
        "Compared %dx%d images over %d channel(s): %d/%d pixels above threshold %g",
        width,
        height,
        aligned_a.shape[2],
        mismatch_count,
        total,
        threshold,
    )

    return ComparisonResult(
        matches=mismatch_count <= allowed,
        mismatch_ratio=mismatch_ratio,
        mismatched_pixels=mismatch_count,
        total_pixels=total,
        width=width,
        height=height,
        channels=aligned_a.shape[2],
        threshold=threshold,
        allowed_mismatches=allowed,
        max_difference=max_difference,
        diff_image=diff_image,
    )


# ---------------------------------------------------------------------------
# Channel alignment
# ---------------------------------------------------------------------------


def _with_channel_axis(grid: np.ndarray) -> np.ndarray:
    if grid.ndim == 2:
        return grid[:, :, np.newaxis]
    return grid


def _has_alpha(grid: np.ndarray) -> bool:
    return grid.shape[2] in (2, 4)


def _grey_to_color(grid: np.ndarray) -> np.ndarray:
    grey = np.repeat(grid[:, :, :1], 3, axis=2)
    if grid.shape[2] == 2:
        return np.concatenate([grey, grid[:, :, 1:]], axis=2)
    return grey


def _align_channels(grid_a: np.ndarray, grid_b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    a = _with_channel_axis(grid_a)
    b = _with_channel_axis(grid_b)
    if a.shape[2] == b.shape[2]:
        return a, b

    if _has_alpha(a) and not _has_alpha(b):
        a = a[:, :, :-1]
    elif _has_alpha(b) and not _has_alpha(a):
        b = b[:, :, :-1]

    if a.shape[2] < b.shape[2]:
        a = _grey_to_color(a)
    elif b.shape[2] < a.shape[2]:
        b = _grey_to_color(b)
    return a, b


# ---------------------------------------------------------------------------
# Differences
# ---------------------------------------------------------------------------


def _max_value(dtype: np.dtype) -> float:
    if np.issubdtype(dtype, np.integer):
        return float(np.iinfo(dtype).max)
    return 1.0


def _channel_differences(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Return ``|a - b|`` per channel, normalised to ``[0, 1]``."""

    if a.dtype == b.dtype and np.issubdtype(a.dtype, np.integer):
        # subtract exactly before dividing so equal integer gaps give equal metrics
        raw = np.abs(a.astype(np.int64) - b.astype(np.int64))
        return raw / _max_value(a.dtype)
    norm_a = a.astype(np.float64) / _max_value(a.dtype)
    norm_b = b.astype(np.float64) / _max_value(b.dtype)
    return np.abs(norm_a - norm_b)


# ---------------------------------------------------------------------------
# Diff image rendering
# ---------------------------------------------------------------------------


def _to_rgb8(grid: np.ndarray) -> np.ndarray:
    scaled = np.clip(grid.astype(np.float64) / _max_value(grid.dtype), 0.0, 1.0)
    rgb8 = np.round(scaled * 255.0).astype(np.uint8)
    rgb8 = _with_channel_axis(rgb8)
    if rgb8.shape[2] <= 2:
        return np.repeat(rgb8[:, :, :1], 3, axis=2)
    return rgb8[:, :, :3]


def _render_diff(
    grid_a: np.ndarray,
    channel_diff: np.ndarray,
    mismatched: np.ndarray,
    threshold: float,
    style: DiffStyle,
) -> np.ndarray:
    if style.mode == "error":
        return _render_error_map(channel_diff, threshold)
    return _render_highlight(grid_a, mismatched, style)


def _render_highlight(grid_a: np.ndarray, mismatched: np.ndarray, style: DiffStyle) -> np.ndarray:
    dimmed = (_to_rgb8(grid_a).astype(np.float64) * style.dim).astype(np.uint8)
    dimmed[mismatched] = style.highlight
    return dimmed


def _render_error_map(channel_diff: np.ndarray, threshold: float) -> np.ndarray:
    """Remap failing channel errors into ``[128, 255]``; passing channels are 0."""

    diff8 = np.round(channel_diff * 255.0).astype(np.uint8)
    values = np.where(channel_diff > threshold, 128 | (diff8 >> 1), 0).astype(np.uint8)
    channels = values.shape[2]
    if channels <= 2:
        return np.repeat(values.max(axis=2, keepdims=True), 3, axis=2)
    rgb = values[:, :, :3]
    if channels == 4:
        rgb = np.maximum(rgb, values[:, :, 3:4])
    return np.ascontiguousarray(rgb)
