"""Taichi-based Whitted-style ray tracer.

This package renders spheres over a checkerboard floor with point lights,
using:
- Diffuse and Phong specular shading with hard shadows
- Mirror reflection and Snell refraction up to a fixed depth
- A 4-component albedo weighting the four shading terms
- Parallel per-pixel rendering into a float framebuffer

Subpackages:
    core: Ray and vector utilities, integrator, and render driver
    geometry: Sphere and checkerboard intersection
    materials: Material parameters, presets, and registry
    scene: Lights, scene storage, scene manager, and default scene
    camera: Pinhole camera ray generation
    preview: PPM/PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
