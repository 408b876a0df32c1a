"""Output module for encoding finished images.

Components:
    ppm: 8-bit conversion and plain-text (P3) PPM writer
    png: PNG writer via Pillow

Writers take a finished (height, width, 3) float image in [0, 1] with
row 0 at the top, as returned by Renderer.get_image_numpy(). Failures at
the file boundary are raised as ImageWriteError.
"""

from .png import save_png
from .ppm import format_ppm, image_rows, to_rgb8, write_ppm

__all__ = [
    "to_rgb8",
    "image_rows",
    "format_ppm",
    "write_ppm",
    "save_png",
]
