"""Scene-level ray intersection.

This module finds the nearest surface hit by a ray among all scene objects:
every sphere, then the checkerboard floor if it is strictly closer than the
nearest sphere. Hits farther than FAR_CLIP are reported as misses so that
rays escaping the scene resolve to the background color.

The scene stores spheres in Taichi fields; each sphere references a material
id in the material registry.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.material import IVORY, add_material
    >>> from tinytracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((-3.0, 0.0, -16.0), 2.0, material_id=add_material(IVORY))
    >>> # Use scene_intersect within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from tinytracer.geometry.checkerboard import (
    checkerboard_color,
    intersect_checkerboard,
    reset_checkerboard,
)
from tinytracer.geometry.sphere import Sphere, ray_intersect, sphere_normal
from tinytracer.materials.material import (
    Material,
    get_material,
    make_checkerboard_material,
)
from tinytracer.scene.lights import clear_lights

# Type aliases
vec3 = tm.vec3
vec4 = tm.vec4

# Hits at or beyond this distance count as misses (horizon cutoff)
FAR_CLIP = 1000.0

# Initial "nothing hit yet" distance
_NO_HIT_DISTANCE = 1e30


@ti.dataclass
class SceneHit:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray hit anything closer than FAR_CLIP (1 or 0).
        t: The ray parameter of the hit. Only valid if hit == 1.
        point: The hit point. Only valid if hit == 1.
        normal: The outward unit surface normal at the hit point.
            Only valid if hit == 1.
        material: The material of the hit surface. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material: Material


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres and lights and restore the default floor.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    clear_lights()
    reset_checkerboard()


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material id to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHit:
    """Create a SceneHit indicating no intersection."""
    return SceneHit(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material=Material(
            refractive_index=1.0,
            albedo=vec4(0.0, 0.0, 0.0, 0.0),
            diffuse_color=vec3(0.0, 0.0, 0.0),
            specular_exponent=0.0,
        ),
    )


@ti.func
def scene_intersect(origin: vec3, direction: vec3) -> SceneHit:
    """Find the nearest surface hit by a ray.

    Tests every sphere and keeps the smallest positive distance, then tests
    the checkerboard floor, which only wins when strictly closer. The result
    is a hit only if the winning distance is below FAR_CLIP.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray.

    Returns:
        A SceneHit with the nearest hit, or a miss record.
    """
    result = _make_miss_record()
    spheres_distance = _NO_HIT_DISTANCE
    checkerboard_distance = _NO_HIT_DISTANCE

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        hit, t = ray_intersect(origin, direction, sphere)
        if hit == 1 and t < spheres_distance:
            spheres_distance = t
            point = origin + direction * t
            result.t = t
            result.point = point
            result.normal = sphere_normal(sphere, point)
            result.material = get_material(sphere_material_ids[i])

    plane_hit, plane_t, plane_point = intersect_checkerboard(
        origin, direction, spheres_distance
    )
    if plane_hit == 1:
        checkerboard_distance = plane_t
        result.t = plane_t
        result.point = plane_point
        result.normal = vec3(0.0, 1.0, 0.0)
        result.material = make_checkerboard_material(checkerboard_color(plane_point))

    if ti.min(spheres_distance, checkerboard_distance) < FAR_CLIP:
        result.hit = 1

    return result


@ti.func
def scene_occluded(origin: vec3, direction: vec3, max_distance: ti.f32) -> ti.i32:
    """Shadow query: is anything hit closer than max_distance?

    The distance is measured from the ray origin to the hit point, so it
    equals the ray parameter only for unit directions.

    Args:
        origin: The (already offset) shadow ray origin.
        direction: The unit direction toward the light.
        max_distance: The distance to the light.

    Returns:
        1 if the light is blocked, 0 otherwise.
    """
    occluded = 0
    shadow = scene_intersect(origin, direction)
    if shadow.hit == 1 and tm.length(shadow.point - origin) < max_distance:
        occluded = 1
    return occluded
