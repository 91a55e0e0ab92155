"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera looking down -Z

The camera maps pixel indices (column from the left, row from the top) to
world-space rays through pixel centers. Ray generation is a Taichi function
so every pixel's primary ray is built inside the parallel render kernel.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_info",
]
