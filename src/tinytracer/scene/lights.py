"""Point lights.

A point light has a position and a scalar intensity; it emits white light
equally in all directions. Lights are registered at scene-setup time and are
read-only while rendering.
"""

from __future__ import annotations

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class PointLight:
    """Host-side description of a point light.

    Attributes:
        position: Light position in world space (x, y, z).
        intensity: Scalar intensity (non-negative).
    """

    position: tuple[float, float, float]
    intensity: float


# Maximum number of lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(position: tuple[float, float, float], intensity: float) -> int:
    """Add a point light to the scene.

    Args:
        position: Light position in world space.
        intensity: Scalar intensity.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If the intensity is negative.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    if intensity < 0.0:
        raise ValueError(f"Light intensity = {intensity} must be non-negative.")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])
