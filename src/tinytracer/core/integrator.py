"""Whitted-style integrator: local shading and recursive ray casting.

For a ray that hits a surface with point P, normal N and material M, the
color is

    M.diffuse_color * M.albedo[0] * diffuse_intensity
    + white * M.albedo[1] * specular_intensity
    + cast_ray(reflected ray, depth + 1) * M.albedo[2]
    + cast_ray(refracted ray, depth + 1) * M.albedo[3]

where the diffuse and specular intensities are summed over all point lights
that are not blocked by a shadow ray. A ray that misses, or any ray at depth
MAX_DEPTH, returns BACKGROUND_COLOR. No clamping is applied.

Taichi functions cannot recurse, so cast_ray walks the reflection/refraction
tree with a small explicit work stack. Each stack entry carries the product
of albedo weights along its path; since the color is linear in the child
colors, summing weight * local_color over all visited nodes gives the same
result as the recursive definition. Zero-weight branches are still traced,
so the cost per primary ray is bounded by the full binary tree of depth
MAX_DEPTH.

Key features:
    - Binary (hard) shadows from point lights
    - Mirror reflection and Snell refraction
    - Ray origin bias to avoid self-intersection
    - Parallel-for over pixels with disjoint per-pixel writes

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.core.integrator import render_image, setup_render_target
    >>> from tinytracer.scene.default_scene import create_default_scene
    >>> from tinytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.width, camera.height)
    >>> render_image()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from tinytracer.camera.pinhole import get_ray
from tinytracer.core.vector import normalize, reflect, refract
from tinytracer.scene.intersection import SceneHit, scene_intersect, scene_occluded
from tinytracer.scene.lights import light_intensities, light_positions, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Rays at this depth are not traced; they return the background color
MAX_DEPTH = 5

# Offset along the normal applied to every secondary ray origin
RAY_BIAS = 1e-3

# Color of rays that escape the scene
BACKGROUND_COLOR = vec3(0.2, 0.5, 0.8)

# Pending rays never exceed one per depth level below MAX_DEPTH
STACK_SIZE = MAX_DEPTH + 1

# =============================================================================
# Render Target (Framebuffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Framebuffer indexed [row, column], row 0 at the top
_framebuffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the framebuffer.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the framebuffer to black."""
    _framebuffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_framebuffer_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered colors as a NumPy array.

    Values are the raw, unclamped shading results.

    Returns:
        Array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _framebuffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)


# =============================================================================
# Shading
# =============================================================================


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point RAY_BIAS along the normal toward the side the new ray
    travels: outward for reflected and shadow rays leaving the surface,
    inward for rays entering it.

    Args:
        point: The hit point.
        normal: The surface normal at the hit point.
        direction: The direction of the new ray.

    Returns:
        The offset origin.
    """
    result = point + normal * RAY_BIAS
    if tm.dot(direction, normal) < 0.0:
        result = point - normal * RAY_BIAS
    return result


@ti.func
def shade_direct(direction: vec3, hit: SceneHit) -> vec3:
    """Diffuse and specular light from all unblocked point lights.

    Args:
        direction: The direction of the ray that produced the hit.
        hit: The surface hit.

    Returns:
        The local (non-recursive) part of the shaded color.
    """
    diffuse_intensity = 0.0
    specular_intensity = 0.0
    normal = hit.normal
    material = hit.material

    for i in range(num_lights[None]):
        to_light = light_positions[i] - hit.point
        light_direction = normalize(to_light)
        light_distance = tm.length(to_light)
        shadow_origin = offset_ray_origin(hit.point, normal, light_direction)

        if scene_occluded(shadow_origin, light_direction, light_distance) == 0:
            intensity = light_intensities[i]

            denominator = tm.length(light_direction) * tm.length(normal)
            diffuse_factor = 0.0
            if denominator > 0.0:
                diffuse_factor = tm.dot(light_direction, normal) / denominator
            diffuse_intensity += intensity * ti.max(0.0, diffuse_factor)

            cos_highlight = tm.dot(reflect(light_direction, normal), direction)
            highlight = 0.0
            if cos_highlight > 0.0:
                highlight = cos_highlight**material.specular_exponent
            elif material.specular_exponent == 0.0:
                highlight = 1.0
            specular_intensity += intensity * highlight

    diffuse = material.diffuse_color * material.albedo[0] * diffuse_intensity
    specular = vec3(1.0, 1.0, 1.0) * material.albedo[1] * specular_intensity
    return diffuse + specular


# =============================================================================
# Recursive Ray Casting (explicit work stack)
# =============================================================================


@ti.func
def _push_ray(
    origins: ti.template(),
    directions: ti.template(),
    weights: ti.template(),
    depths: ti.template(),
    slot: ti.i32,
    origin: vec3,
    direction: vec3,
    weight: ti.f32,
    depth: ti.i32,
):
    """Write a pending ray into a stack slot."""
    for k in ti.static(range(STACK_SIZE)):
        if k == slot:
            for c in ti.static(range(3)):
                origins[k, c] = origin[c]
                directions[k, c] = direction[c]
            weights[k] = weight
            depths[k] = depth


@ti.func
def _pop_ray(
    origins: ti.template(),
    directions: ti.template(),
    weights: ti.template(),
    depths: ti.template(),
    slot: ti.i32,
):
    """Read the pending ray stored in a stack slot."""
    origin = vec3(0.0, 0.0, 0.0)
    direction = vec3(0.0, 0.0, 0.0)
    weight = 0.0
    depth = 0
    for k in ti.static(range(STACK_SIZE)):
        if k == slot:
            origin = vec3(origins[k, 0], origins[k, 1], origins[k, 2])
            direction = vec3(directions[k, 0], directions[k, 1], directions[k, 2])
            weight = weights[k]
            depth = depths[k]
    return origin, direction, weight, depth


@ti.func
def cast_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Compute the color seen along a ray.

    Args:
        origin: The starting point of the ray.
        direction: The normalized direction of the ray.
        depth: The recursion depth of this ray (0 for primary rays).

    Returns:
        The unclamped RGB color.
    """
    color = vec3(0.0, 0.0, 0.0)

    origins = ti.Matrix.zero(ti.f32, STACK_SIZE, 3)
    directions = ti.Matrix.zero(ti.f32, STACK_SIZE, 3)
    weights = ti.Vector.zero(ti.f32, STACK_SIZE)
    depths = ti.Vector.zero(ti.i32, STACK_SIZE)
    top = 0

    if depth >= MAX_DEPTH:
        color = BACKGROUND_COLOR
    else:
        _push_ray(origins, directions, weights, depths, top, origin, direction, 1.0, depth)
        top = 1

    while top > 0:
        top -= 1
        ray_origin, ray_direction, weight, ray_depth = _pop_ray(
            origins, directions, weights, depths, top
        )
        hit = scene_intersect(ray_origin, ray_direction)

        if hit.hit == 0:
            color += weight * BACKGROUND_COLOR
        else:
            material = hit.material
            color += weight * shade_direct(ray_direction, hit)

            child_depth = ray_depth + 1

            # Reflected ray
            reflect_weight = weight * material.albedo[2]
            if child_depth >= MAX_DEPTH:
                color += reflect_weight * BACKGROUND_COLOR
            else:
                reflect_direction = normalize(reflect(ray_direction, hit.normal))
                reflect_origin = offset_ray_origin(hit.point, hit.normal, reflect_direction)
                _push_ray(
                    origins, directions, weights, depths, top,
                    reflect_origin, reflect_direction, reflect_weight, child_depth,
                )
                top += 1

            # Refracted ray; total internal reflection sees the background
            refract_weight = weight * material.albedo[3]
            refract_direction, refracted = refract(
                ray_direction, hit.normal, material.refractive_index
            )
            if child_depth >= MAX_DEPTH or refracted == 0:
                color += refract_weight * BACKGROUND_COLOR
            else:
                refract_direction = normalize(refract_direction)
                refract_origin = offset_ray_origin(hit.point, hit.normal, refract_direction)
                _push_ray(
                    origins, directions, weights, depths, top,
                    refract_origin, refract_direction, refract_weight, child_depth,
                )
                top += 1

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(row_start: ti.i32, row_end: ti.i32, width: ti.i32, height: ti.i32):
    """Render a band of rows, one pixel per parallel task."""
    for j, i in ti.ndrange((row_start, row_end), width):
        ray = get_ray(i, j, width, height)
        _framebuffer[j, i] = cast_ray(ray.origin, ray.direction, 0)


@ti.kernel
def _render_rows_serial(row_start: ti.i32, row_end: ti.i32, width: ti.i32, height: ti.i32):
    """Render a band of rows on a single thread, in row-major order."""
    ti.loop_config(serialize=True)
    for j, i in ti.ndrange((row_start, row_end), width):
        ray = get_ray(i, j, width, height)
        _framebuffer[j, i] = cast_ray(ray.origin, ray.direction, 0)


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Cast one ray and return its color."""
    return cast_ray(origin, direction, depth)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """Render a single pixel and return its color."""
    ray = get_ray(pixel_i, pixel_j, width, height)
    return cast_ray(ray.origin, ray.direction, 0)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(row_start: int, row_end: int, parallel: bool = True) -> None:
    """Render the rows [row_start, row_end) into the framebuffer.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.
        parallel: Render pixels in parallel (True) or on one thread.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside image height {height}")
    if row_start == row_end:
        return

    if parallel:
        _render_rows(row_start, row_end, width, height)
    else:
        _render_rows_serial(row_start, row_end, width, height)


def render_image(parallel: bool = True) -> None:
    """Render every pixel of the framebuffer.

    Args:
        parallel: Render pixels in parallel (True) or on one thread.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    _, height = get_image_dimensions()
    render_rows(0, height, parallel=parallel)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
) -> tuple[float, float, float]:
    """Cast a single ray against the current scene.

    This is a Python-callable function for testing and debugging. For
    rendering, use render_image() which processes all pixels in parallel.

    Args:
        origin: Ray origin.
        direction: Ray direction (should be normalized).
        depth: Starting recursion depth.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_single(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Render a single pixel of the current render target.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height)
    return (float(color[0]), float(color[1]), float(color[2]))
