"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the Ray dataclass and the small set of vector operations
the tracer is built on: dot product, norm, normalization, mirror reflection
and Snell refraction. All operations are Taichi functions so they can be
called from within rendering kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type aliases for 3D points/directions/colors and 4-component albedo weights
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Normalized by every
            caller in this package, though intersection does not require it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean norm of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The zero vector has no direction; normalizing it divides by zero and
    yields non-finite components. Callers must not pass it.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return v / tm.length(v)


@ti.func
def reflect(direction: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a surface normal.

    Computes R = D - 2 * N * (D . N). Applying it twice about the same normal
    returns the original direction. The result is only unit length when both
    inputs are, so callers normalize it before tracing.

    Args:
        direction: The incoming direction.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction.
    """
    return direction - 2.0 * normal * tm.dot(direction, normal)


@ti.func
def refract(direction: vec3, normal: vec3, refractive_index: ti.f32):
    """Refract a direction through a surface using Snell's law.

    The normal is assumed to point out of the object. When the ray leaves the
    object (cos < 0 against the outward normal) the index ratio, the cosine
    and the normal are all flipped so the same formula handles both sides.

    Total internal reflection (k > 1) has no real solution. Instead of letting
    the square root of a negative number produce NaN, the function reports it
    through the second return value.

    Args:
        direction: The incoming direction (should be normalized).
        normal: The outward surface normal (should be normalized).
        refractive_index: The index of refraction of the object.

    Returns:
        A tuple of (refracted_direction, refracted) where:
        - refracted_direction: The transmitted direction (not normalized),
          or the zero vector on total internal reflection.
        - refracted: 1 if a transmitted direction exists, 0 on total
          internal reflection.
    """
    n = normal
    ratio = 1.0 / refractive_index
    cos_incidence = -tm.dot(n, direction)

    if cos_incidence < 0.0:
        # Leaving the object: from the dense medium back into air
        ratio = refractive_index
        cos_incidence = -cos_incidence
        n = -n

    k = ratio * ratio * (1.0 - cos_incidence * cos_incidence)

    result = vec3(0.0, 0.0, 0.0)
    refracted = 0
    if k <= 1.0:
        refracted = 1
        result = direction * ratio + n * (ratio * cos_incidence - ti.sqrt(1.0 - k))

    return result, refracted
