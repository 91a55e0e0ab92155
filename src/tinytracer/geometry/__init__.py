"""Geometry module for scene primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    checkerboard: Clipped horizontal plane with a procedural checker pattern

All intersection routines are Taichi functions (@ti.func) returning a hit
flag and the ray parameter of the nearest positive hit:
    hit, t = ray_intersect(ray_origin, ray_direction, sphere)
"""

from .checkerboard import (
    PARALLEL_EPSILON,
    CheckerboardConfig,
    checkerboard_color,
    checkerboard_tile_index,
    disable_checkerboard,
    get_checkerboard_config,
    intersect_checkerboard,
    is_checkerboard_enabled,
    reset_checkerboard,
    setup_checkerboard,
)
from .sphere import Sphere, make_sphere, ray_intersect, sphere_normal

__all__ = [
    "Sphere",
    "make_sphere",
    "ray_intersect",
    "sphere_normal",
    "CheckerboardConfig",
    "PARALLEL_EPSILON",
    "setup_checkerboard",
    "reset_checkerboard",
    "disable_checkerboard",
    "is_checkerboard_enabled",
    "get_checkerboard_config",
    "intersect_checkerboard",
    "checkerboard_tile_index",
    "checkerboard_color",
]
