"""Utility functions used across the project."""

from .image_io import as_pixel_grid, load_image, save_image

__all__ = [
    "as_pixel_grid",
    "load_image",
    "save_image",
]
