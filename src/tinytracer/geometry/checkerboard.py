"""Procedural checkerboard floor.

The floor is the horizontal plane y = height, clipped to a finite tile
|x| < half_width, z_min < z < z_max so that it appears as a board under the
spheres rather than an infinite ground plane. Tiles are 2x2 units and are
colored by the parity of their integer tile index.

Two parity rules are available:

    legacy: int(0.5 * x + 1000) + int(0.5 * z), truncating toward zero.
        The +1000 keeps the x term positive before truncation; the z term is
        negative over the whole default board, so its truncation rounds up.
        This is the historical rule and the default.
    floor:  floor(0.5 * x) + floor(0.5 * z), a true tile index. The board
        pattern is the same but the two colors swap relative to legacy.

Example:
    >>> from tinytracer.geometry.checkerboard import (
    ...     CheckerboardConfig, setup_checkerboard
    ... )
    >>> setup_checkerboard(CheckerboardConfig(parity="floor"))
"""

from dataclasses import asdict, dataclass
from typing import Any, Literal

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

ParityMode = Literal["legacy", "floor"]

# Rays flatter than this never test the plane; dividing by a near-zero
# direction.y would send the hit point to infinity.
PARALLEL_EPSILON = 1e-3


@dataclass
class CheckerboardConfig:
    """Configuration of the checkerboard floor.

    Attributes:
        enabled: Whether the floor takes part in intersection.
        height: The y coordinate of the plane.
        half_width: Tiles are drawn where |x| < half_width.
        z_min: Open lower bound of the board along z.
        z_max: Open upper bound of the board along z.
        odd_color: Color of tiles with an odd index (white by default).
        even_color: Color of tiles with an even index (pale orange).
        dim: Factor applied to the tile color (darkens the floor).
        parity: Tile index rule, "legacy" or "floor".
    """

    enabled: bool = True
    height: float = -4.0
    half_width: float = 10.0
    z_min: float = -30.0
    z_max: float = -10.0
    odd_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    even_color: tuple[float, float, float] = (1.0, 0.7, 0.3)
    dim: float = 0.3
    parity: ParityMode = "legacy"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        data = asdict(self)
        data["odd_color"] = list(self.odd_color)
        data["even_color"] = list(self.even_color)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CheckerboardConfig":
        """Build a config from a dictionary, filling in defaults."""
        defaults = cls()
        odd = data.get("odd_color", defaults.odd_color)
        even = data.get("even_color", defaults.even_color)
        return cls(
            enabled=bool(data.get("enabled", defaults.enabled)),
            height=float(data.get("height", defaults.height)),
            half_width=float(data.get("half_width", defaults.half_width)),
            z_min=float(data.get("z_min", defaults.z_min)),
            z_max=float(data.get("z_max", defaults.z_max)),
            odd_color=(odd[0], odd[1], odd[2]),
            even_color=(even[0], even[1], even[2]),
            dim=float(data.get("dim", defaults.dim)),
            parity=data.get("parity", defaults.parity),
        )


# =============================================================================
# Taichi Fields for Checkerboard State
# =============================================================================

_enabled = ti.field(dtype=ti.i32, shape=())
_height = ti.field(dtype=ti.f32, shape=())
_half_width = ti.field(dtype=ti.f32, shape=())
_z_min = ti.field(dtype=ti.f32, shape=())
_z_max = ti.field(dtype=ti.f32, shape=())
_odd_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_even_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_dim = ti.field(dtype=ti.f32, shape=())
_floor_parity = ti.field(dtype=ti.i32, shape=())

# Host-side copy of the active configuration
_active_config = CheckerboardConfig()


def setup_checkerboard(config: CheckerboardConfig) -> None:
    """Configure the checkerboard floor.

    Args:
        config: The floor configuration.

    Raises:
        ValueError: If the parity mode is unknown or the bounds are empty.
    """
    global _active_config

    if config.parity not in ("legacy", "floor"):
        raise ValueError(f"Unknown checkerboard parity mode: {config.parity}")
    if config.half_width <= 0.0:
        raise ValueError(f"half_width = {config.half_width} must be positive.")
    if config.z_min >= config.z_max:
        raise ValueError(
            f"z_min ({config.z_min}) must be smaller than z_max ({config.z_max})."
        )

    _enabled[None] = 1 if config.enabled else 0
    _height[None] = config.height
    _half_width[None] = config.half_width
    _z_min[None] = config.z_min
    _z_max[None] = config.z_max
    _odd_color[None] = list(config.odd_color)
    _even_color[None] = list(config.even_color)
    _dim[None] = config.dim
    _floor_parity[None] = 1 if config.parity == "floor" else 0
    _active_config = config


def reset_checkerboard() -> None:
    """Restore the default floor (enabled, y = -4, legacy parity)."""
    setup_checkerboard(CheckerboardConfig())


def disable_checkerboard() -> None:
    """Remove the floor from intersection (scenes with spheres only)."""
    global _active_config

    _enabled[None] = 0
    _active_config = CheckerboardConfig(
        **{**asdict(_active_config), "enabled": False}
    )


def is_checkerboard_enabled() -> bool:
    """Check if the floor takes part in intersection."""
    return bool(_enabled[None])


def get_checkerboard_config() -> CheckerboardConfig:
    """Get the active floor configuration."""
    return _active_config


# =============================================================================
# Intersection and Coloring (Taichi-compatible)
# =============================================================================


@ti.func
def intersect_checkerboard(origin: vec3, direction: vec3, t_max: ti.f32):
    """Intersect a ray with the clipped checkerboard plane.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray.
        t_max: Only hits strictly closer than this are accepted (the nearest
            sphere distance found so far).

    Returns:
        A tuple of (hit, t, point) where hit is 1 if the board was hit.
    """
    hit = 0
    t = 0.0
    point = vec3(0.0, 0.0, 0.0)

    if _enabled[None] == 1 and ti.abs(direction.y) > PARALLEL_EPSILON:
        d = -(origin.y - _height[None]) / direction.y
        p = origin + direction * d

        if (
            d > 0.0
            and ti.abs(p.x) < _half_width[None]
            and p.z < _z_max[None]
            and p.z > _z_min[None]
            and d < t_max
        ):
            hit = 1
            t = d
            point = p

    return hit, t, point


@ti.func
def checkerboard_tile_index(point: vec3) -> ti.i32:
    """Integer tile index of a point on the board (see module docstring)."""
    index = 0
    if _floor_parity[None] == 1:
        index = ti.cast(ti.floor(0.5 * point.x), ti.i32) + ti.cast(
            ti.floor(0.5 * point.z), ti.i32
        )
    else:
        index = ti.cast(0.5 * point.x + 1000.0, ti.i32) + ti.cast(0.5 * point.z, ti.i32)
    return index


@ti.func
def checkerboard_color(point: vec3) -> vec3:
    """Dimmed tile color at a point on the board."""
    color = _even_color[None]
    if (checkerboard_tile_index(point) & 1) == 1:
        color = _odd_color[None]
    return color * _dim[None]
