"""Core rendering module.

Components:
    vector: Ray data structure and vector utilities (dot, norm, reflect, refract)
    integrator: Whitted shading, bounded recursive ray casting, render target
    renderer: Render driver wrapping the integrator (row batches, output)

The core module handles the intersection/shading pipeline: a primary ray is
cast into the scene, local illumination is computed from shadow-tested point
lights, and reflected and refracted contributions are gathered up to a fixed
recursion depth.

All compute-intensive operations use Taichi kernels.
"""

from .vector import (
    Ray,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    reflect,
    refract,
    vec3,
    vec4,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from tinytracer.core.integrator or tinytracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "vec4",
    "dot",
    "length",
    "normalize",
    "reflect",
    "refract",
]
