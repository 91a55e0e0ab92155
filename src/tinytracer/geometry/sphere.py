"""Sphere primitive with ray-sphere intersection.

The intersection uses the half-b form of the quadratic with a direction that
need not be unit length in principle, though every caller in this package
passes normalized directions:

    L = O - C
    b = L . D
    delta = b^2 - L . L + r^2

A negative discriminant means the ray misses. Otherwise the two roots are
s1 = -b - sqrt(delta) and s2 = -b + sqrt(delta) with s1 <= s2. The entry root
is used when it lies in front of the origin; when only the exit root does,
the origin is inside the sphere and the exit point is returned.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.geometry.sphere import Sphere, ray_intersect
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -10), radius=2.0)
    >>> # Use ray_intersect within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def ray_intersect(origin: vec3, direction: vec3, sphere: Sphere):
    """Find the nearest positive intersection of a ray with a sphere.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray.
        sphere: The sphere to test.

    Returns:
        A tuple of (hit, t) where:
        - hit: 1 if the ray hits the sphere in front of its origin, else 0.
        - t: The ray parameter of the hit (entry point, or exit point when
          the origin is inside). Only valid if hit == 1.
    """
    to_origin = origin - sphere.center
    b = tm.dot(to_origin, direction)
    delta = b * b - tm.dot(to_origin, to_origin) + sphere.radius * sphere.radius

    hit = 0
    t = 0.0

    if delta >= 0.0:
        root = ti.sqrt(delta)
        s1 = -b - root
        s2 = -b + root

        if s1 > 0.0:
            hit = 1
            t = s1
        elif s2 > 0.0:
            # Origin inside the sphere
            hit = 1
            t = s2

    return hit, t


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return tm.normalize(point - sphere.center)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
