"""Custom exceptions used across imgcmp."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

__all__ = [
    "ImgcmpError",
    "ImageLoadError",
    "ImageSaveError",
    "DimensionMismatchError",
    "UnsupportedImageError",
]

Size = Tuple[int, int]


class ImgcmpError(Exception):
    """Base class for every failure reported by imgcmp."""

    pass


class ImageLoadError(ImgcmpError):
    """Raised when an image file cannot be opened or decoded."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")


class ImageSaveError(ImgcmpError):
    """Raised when a difference image cannot be encoded or written."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")


class DimensionMismatchError(ImgcmpError):
    """Raised when the two images do not share the same width and height."""

    def __init__(self, size_a: Size, size_b: Size) -> None:
        self.size_a = size_a
        self.size_b = size_b
        super().__init__(
            "Images have different sizes (got {}x{} and {}x{})".format(*size_a, *size_b)
        )


class UnsupportedImageError(ImgcmpError, ValueError):
    """Raised for pixel data that is not a 2-D grid of 1 to 4 channels."""

    pass
