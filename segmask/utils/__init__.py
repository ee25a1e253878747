"""Utilities: image I/O, settings, logging."""

from segmask.utils.image_io import load_image, save_image
from segmask.utils.log import configure_logging

__all__ = [
    "load_image",
    "save_image",
    "configure_logging",
]
