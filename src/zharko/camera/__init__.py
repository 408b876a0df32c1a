"""Cameras: turn image coordinates into world-space primary rays.

Image coordinates are normalized, s from 0 at the left edge to 1 at the
right and t from 0 at the bottom edge to 1 at the top.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
