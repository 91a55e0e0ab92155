"""Default-scene pixels checked against a recursive NumPy Whitted tracer.

The integrator walks the reflection/refraction tree with an explicit stack.
These tests compare its output with a plain recursive float64 version of the
same shading model on glass, mirror and floor pixels, lit and shadowed.
Pixels next to an edge are skipped so float32 rounding cannot flip a hit.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import math

import numpy as np
import pytest

WIDTH = 64
HEIGHT = 48

BACKGROUND = np.array([0.2, 0.5, 0.8])
MAX_DEPTH = 5
BIAS = 1e-3
FAR_CLIP = 1000.0


# =============================================================================
# Recursive reference tracer
# =============================================================================


def _normalize(v):
    return v / np.linalg.norm(v)


def _reflect(d, n):
    return d - 2.0 * n * np.dot(d, n)


def _refract(d, n, eta):
    ratio = 1.0 / eta
    cos_i = -np.dot(n, d)
    if cos_i < 0.0:
        ratio = eta
        cos_i = -cos_i
        n = -n
    k = ratio * ratio * (1.0 - cos_i * cos_i)
    if k > 1.0:
        return None
    return d * ratio + n * (ratio * cos_i - math.sqrt(1.0 - k))


def _offset(point, normal, direction):
    if np.dot(direction, normal) < 0.0:
        return point - normal * BIAS
    return point + normal * BIAS


class ReferenceScene:
    """Spheres, lights and the legacy-parity checkerboard in float64."""

    def __init__(self, config):
        from tinytracer.scene.manager import material_from_dict

        materials = [material_from_dict(m) for m in config.materials]
        self.spheres = [
            (
                np.array(s["center"], dtype=np.float64),
                float(s["radius"]),
                materials[s["material_id"]],
            )
            for s in config.spheres
        ]
        self.lights = [
            (np.array(light["position"], dtype=np.float64), float(light["intensity"]))
            for light in config.lights
        ]

    def intersect(self, origin, direction):
        """Return (point, normal, material, tag) of the nearest hit, or None.

        The tag is ("sphere", index) or ("floor", tile_index).
        """
        nearest = math.inf
        result = None
        for index, (center, radius, params) in enumerate(self.spheres):
            to_origin = origin - center
            b = np.dot(to_origin, direction)
            delta = b * b - np.dot(to_origin, to_origin) + radius * radius
            if delta < 0.0:
                continue
            root = math.sqrt(delta)
            t = -b - root
            if t <= 0.0:
                t = -b + root
            if 0.0 < t < nearest:
                nearest = t
                point = origin + direction * t
                material = (
                    np.array(params.albedo),
                    np.array(params.diffuse_color),
                    params.specular_exponent,
                    params.refractive_index,
                )
                result = (point, _normalize(point - center), material, ("sphere", index))

        if abs(direction[1]) > 1e-3:
            t = -(origin[1] + 4.0) / direction[1]
            point = origin + direction * t
            if t > 0.0 and abs(point[0]) < 10.0 and -30.0 < point[2] < -10.0 and t < nearest:
                nearest = t
                tile = int(0.5 * point[0] + 1000.0) + int(0.5 * point[2])
                color = np.array([1.0, 1.0, 1.0]) if tile & 1 else np.array([1.0, 0.7, 0.3])
                material = (np.array([1.0, 0.0, 0.0, 0.0]), color * 0.3, 1.0, 1.0)
                result = (point, np.array([0.0, 1.0, 0.0]), material, ("floor", tile))

        if nearest >= FAR_CLIP:
            return None
        return result

    def light_mask(self, point, normal):
        """Tuple of 1 (visible) / 0 (blocked) per light."""
        mask = []
        for position, _ in self.lights:
            to_light = position - point
            direction = _normalize(to_light)
            origin = _offset(point, normal, direction)
            shadow = self.intersect(origin, direction)
            blocked = shadow is not None and np.linalg.norm(shadow[0] - origin) < np.linalg.norm(
                to_light
            )
            mask.append(0 if blocked else 1)
        return tuple(mask)

    def cast(self, origin, direction, depth=0):
        """Recursive Whitted shading."""
        if depth >= MAX_DEPTH:
            return BACKGROUND
        hit = self.intersect(origin, direction)
        if hit is None:
            return BACKGROUND
        point, normal, (albedo, diffuse_color, exponent, eta), _ = hit

        reflect_dir = _normalize(_reflect(direction, normal))
        reflect_color = self.cast(_offset(point, normal, reflect_dir), reflect_dir, depth + 1)

        refract_dir = _refract(direction, normal, eta)
        if refract_dir is None:
            refract_color = BACKGROUND
        else:
            refract_dir = _normalize(refract_dir)
            refract_color = self.cast(_offset(point, normal, refract_dir), refract_dir, depth + 1)

        diffuse = 0.0
        specular = 0.0
        for (position, intensity), visible in zip(self.lights, self.light_mask(point, normal)):
            if not visible:
                continue
            light_dir = _normalize(position - point)
            diffuse += intensity * max(0.0, np.dot(light_dir, normal))
            cos_highlight = np.dot(_reflect(light_dir, normal), direction)
            if cos_highlight > 0.0:
                specular += intensity * cos_highlight**exponent

        return (
            diffuse_color * albedo[0] * diffuse
            + np.ones(3) * albedo[1] * specular
            + reflect_color * albedo[2]
            + refract_color * albedo[3]
        )


def _primary_direction(i, j, tan_half_fov):
    x = (2.0 * (i + 0.5) / WIDTH - 1.0) * tan_half_fov * WIDTH / HEIGHT
    y = -(2.0 * (j + 0.5) / HEIGHT - 1.0) * tan_half_fov
    return _normalize(np.array([x, y, -1.0]))


def _classify(scene, i, j, tan_half_fov):
    """Label a pixel by what its primary ray hits.

    Returns None for a miss, else (kind, key, light_mask, seam_margin). The
    key is the sphere index, or the tile parity on the floor; the margin is
    how far the floor hit lies from the nearest tile seam, in tile units.
    """
    hit = scene.intersect(np.zeros(3), _primary_direction(i, j, tan_half_fov))
    if hit is None:
        return None
    point, normal, _, (kind, key) = hit
    margin = math.inf
    if kind == "floor":
        u = 0.5 * point[0] + 1000.0
        v = 0.5 * point[2]
        margin = min(abs(u - round(u)), abs(v - round(v)))
        key = key & 1
    return kind, key, scene.light_mask(point, normal), margin


# =============================================================================
# Tests
# =============================================================================


@pytest.fixture(scope="module")
def default_render():
    """The 64x48 default scene rendered by tinytracer, plus the reference scene."""
    from tinytracer.camera.pinhole import PinholeCamera
    from tinytracer.core.renderer import render_scene
    from tinytracer.scene.default_scene import default_scene_config

    config = default_scene_config()
    camera = PinholeCamera(width=WIDTH, height=HEIGHT)
    framebuffer = render_scene(config, camera).copy()

    scene = ReferenceScene(config)
    tan_half_fov = math.tan(camera.fov / 2.0)
    labels = {
        (i, j): _classify(scene, i, j, tan_half_fov)
        for j in range(HEIGHT)
        for i in range(WIDTH)
    }
    return framebuffer, scene, tan_half_fov, labels


def _stable_pixels(labels, predicate):
    """Pixels matching predicate that sit clear of object and shadow edges.

    A pixel qualifies when its left and right neighbours hit the same object
    (any tile for the floor) with the same lights visible.
    """

    def key(label):
        if label is None:
            return None
        kind, index, mask, _ = label
        return kind, index if kind == "sphere" else None, mask

    pixels = []
    for j in range(1, HEIGHT - 1):
        for i in range(1, WIDTH - 1):
            label = labels[(i, j)]
            if not predicate(label):
                continue
            if label is not None and label[3] < 1e-3:
                continue
            if key(labels[(i - 1, j)]) == key(label) == key(labels[(i + 1, j)]):
                pixels.append((i, j))
    return pixels


def _check_pixels(default_render, pixels):
    framebuffer, scene, tan_half_fov, _ = default_render
    for i, j in pixels:
        expected = scene.cast(np.zeros(3), _primary_direction(i, j, tan_half_fov))
        actual = framebuffer[j, i].astype(np.float64)
        assert np.allclose(actual, expected, rtol=1e-3, atol=1e-3), (
            f"pixel ({i}, {j}): {actual} vs {expected}"
        )


def _sample(pixels, count=5):
    return pixels[:: max(1, len(pixels) // count)]


def _on_sphere(index):
    return lambda label: label is not None and label[:2] == ("sphere", index)


class TestAgainstRecursiveReference:
    """Pixel values of the default scene versus the recursive tracer."""

    def test_glass_sphere(self, default_render):
        """Test pixels on the glass sphere (refraction plus reflection)."""
        pixels = _stable_pixels(default_render[3], _on_sphere(1))
        assert pixels
        _check_pixels(default_render, _sample(pixels))

    def test_mirror_sphere(self, default_render):
        """Test pixels on the mirror sphere (reflection chains)."""
        pixels = _stable_pixels(default_render[3], _on_sphere(3))
        assert pixels
        _check_pixels(default_render, _sample(pixels))

    def test_lit_floor(self, default_render):
        """Test floor pixels that see every light."""
        pixels = _stable_pixels(
            default_render[3],
            lambda label: label is not None and label[0] == "floor" and all(label[2]),
        )
        assert pixels
        _check_pixels(default_render, _sample(pixels))

    def test_shadowed_floor(self, default_render):
        """Test floor pixels with at least one light blocked by a sphere."""
        pixels = _stable_pixels(
            default_render[3],
            lambda label: label is not None and label[0] == "floor" and not all(label[2]),
        )
        assert pixels
        _check_pixels(default_render, pixels)

    def test_background_pixels(self, default_render):
        """Test pixels that miss everything are exactly the background."""
        framebuffer = default_render[0]
        misses = _stable_pixels(default_render[3], lambda label: label is None)
        assert misses
        for i, j in misses:
            assert np.allclose(framebuffer[j, i], BACKGROUND, atol=1e-6)

    @pytest.mark.slow
    def test_every_pixel(self, default_render):
        """Test the whole low-resolution image against the reference."""
        framebuffer, scene, tan_half_fov, _ = default_render
        expected = np.array(
            [
                [
                    scene.cast(np.zeros(3), _primary_direction(i, j, tan_half_fov))
                    for i in range(WIDTH)
                ]
                for j in range(HEIGHT)
            ]
        )
        assert np.allclose(framebuffer, expected, rtol=1e-3, atol=1e-3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
