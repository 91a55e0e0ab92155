"""Pinhole camera for primary ray generation.

The camera sits at a fixed origin looking down the -Z axis with +Y up. The
image plane is at unit distance, and its half-height is tan(fov / 2); the
half-width follows from the aspect ratio. For pixel (i, j), with i counting
columns from the left and j counting rows from the top:

    x =  (2 * (i + 0.5) / width  - 1) * tan(fov / 2) * width / height
    y = -(2 * (j + 0.5) / height - 1) * tan(fov / 2)
    direction = normalize(x, y, -1)

Rays go through pixel centers; there is no jitter and no anti-aliasing.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(width=1024, height=768, fov=math.pi / 2)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(512, 384, 1024, 768)  # Ray near the image center
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from tinytracer.core.vector import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole camera looking down -Z.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in radians.
        origin: Camera position in world space (x, y, z).
    """

    width: int = 1024
    height: int = 768
    fov: float = math.pi / 2.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_tan_half_fov = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the image size is not positive or the field of view
            is outside (0, pi).
    """
    if camera.width <= 0 or camera.height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {camera.width}x{camera.height}"
        )
    if not 0.0 < camera.fov < math.pi:
        raise ValueError(f"Field of view = {camera.fov} rad must be in (0, pi).")

    _camera_origin[None] = list(camera.origin)
    _tan_half_fov[None] = math.tan(camera.fov / 2.0)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera origin with a normalized direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    scale = _tan_half_fov[None]

    x = (2.0 * (ti.cast(pixel_i, ti.f32) + 0.5) / w - 1.0) * scale * w / h
    y = -(2.0 * (ti.cast(pixel_j, ti.f32) + 0.5) / h - 1.0) * scale

    direction = tm.normalize(vec3(x, y, -1.0))
    return make_ray(_camera_origin[None], direction)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (position) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin and tan_half_fov.
    """
    origin_vec = _camera_origin[None]
    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "tan_half_fov": float(_tan_half_fov[None]),
    }
