"""Decode image files into pixel grids and write pixel grids back out.

Everything that touches the filesystem lives here; :mod:`imgcmp.compare` only
ever sees ``numpy`` arrays of shape ``(H, W)`` or ``(H, W, C)``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import ImageLoadError, ImageSaveError, UnsupportedImageError

logger = logging.getLogger(__name__)

PixelSource = Union[np.ndarray, Image.Image]

_KEPT_MODES = {"L", "LA", "RGB", "RGBA"}
_SIXTEEN_BIT_MODES = {"I;16", "I;16L", "I;16B", "I;16N"}


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Return ``img`` in one of the channel layouts the comparator understands."""

    mode = img.mode
    if mode in _KEPT_MODES:
        return img
    if mode in _SIXTEEN_BIT_MODES:
        return img
    if mode == "1":
        return img.convert("L")
    if mode == "P":
        if "transparency" in img.info:
            return img.convert("RGBA")
        return img.convert("RGB")
    if mode == "PA":
        return img.convert("RGBA")
    return img.convert("RGB")


def _to_array(img: Image.Image) -> np.ndarray:
    if img.mode == "I":
        # older Pillow releases open 16-bit greyscale PNGs as 32-bit "I"
        grid = np.asarray(img)
        if grid.size and (grid.min() < 0 or grid.max() > 65535):
            raise UnsupportedImageError("32-bit integer pixels outside the 16-bit range")
        return grid.astype(np.uint16)
    img = _normalize_mode(img)
    if img.mode in _SIXTEEN_BIT_MODES:
        # numpy reports these as native-endian integers; force a plain uint16 view
        return np.asarray(img).astype(np.uint16)
    return np.asarray(img)


def as_pixel_grid(image: PixelSource) -> np.ndarray:
    """Return ``image`` as a ``numpy`` pixel grid, validating its shape and type."""

    if isinstance(image, Image.Image):
        grid = _to_array(image)
    elif isinstance(image, np.ndarray):
        grid = image
    else:
        raise UnsupportedImageError(
            f"Expected a numpy array or PIL image, got {type(image).__name__}"
        )
    if grid.ndim not in (2, 3):
        raise UnsupportedImageError(f"Pixel grids must be 2-D or 3-D, got {grid.ndim}-D")
    if grid.ndim == 3 and not 1 <= grid.shape[2] <= 4:
        raise UnsupportedImageError(f"Unsupported channel count {grid.shape[2]}")
    if not (np.issubdtype(grid.dtype, np.unsignedinteger) or np.issubdtype(grid.dtype, np.floating)):
        raise UnsupportedImageError(f"Unsupported pixel type {grid.dtype}")
    if np.issubdtype(grid.dtype, np.floating) and not np.all((grid >= 0.0) & (grid <= 1.0)):
        raise UnsupportedImageError("Floating point pixels must lie in [0, 1]")
    return grid


def load_image(path: str | Path) -> np.ndarray:
    """Decode the image at ``path`` into a pixel grid.

    Any failure (missing file, permission problem, unknown or corrupt format)
    is raised as :class:`ImageLoadError` naming the offending path.
    """

    path = Path(path)
    if not path.is_file():
        raise ImageLoadError(path, "file not found")
    try:
        with Image.open(path) as img:
            img.load()
            grid = _to_array(img)
    except UnidentifiedImageError as exc:
        raise ImageLoadError(path, "unsupported or corrupt image format") from exc
    except Image.DecompressionBombError as exc:
        raise ImageLoadError(path, str(exc)) from exc
    except UnsupportedImageError as exc:
        raise ImageLoadError(path, str(exc)) from exc
    except OSError as exc:
        raise ImageLoadError(path, str(exc)) from exc
    logger.debug("Loaded %s: %s %s", path, grid.shape, grid.dtype)
    return grid


def _to_pil(grid: np.ndarray) -> Image.Image:
    if grid.ndim == 3 and grid.shape[2] == 1:
        grid = grid[:, :, 0]
    if grid.dtype == np.uint16 and grid.ndim == 2:
        return Image.fromarray(grid)
    if grid.dtype != np.uint8:
        raise UnsupportedImageError(f"Cannot encode pixel type {grid.dtype}")
    return Image.fromarray(np.ascontiguousarray(grid))


def save_image(image: PixelSource, path: str | Path) -> None:
    """Write ``image`` to ``path``; the format follows the file extension."""

    path = Path(path)
    grid = as_pixel_grid(image)
    if grid.shape[0] == 0 or grid.shape[1] == 0:
        raise ImageSaveError(path, "cannot encode an empty image")
    try:
        pil_image = _to_pil(grid)
    except UnsupportedImageError as exc:
        raise ImageSaveError(path, str(exc)) from exc
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        pil_image.save(path)
    except ValueError as exc:
        # Pillow raises ValueError for extensions it does not know
        raise ImageSaveError(path, str(exc)) from exc
    except OSError as exc:
        raise ImageSaveError(path, str(exc)) from exc
    logger.debug("Wrote %s (%dx%d)", path, grid.shape[1], grid.shape[0])
