"""The default demo scene.

Four spheres with the four preset materials float above the checkerboard
floor, lit by three white point lights:

- Ivory sphere on the left
- Glass sphere in front, slightly low
- Large red rubber sphere at the back
- Large mirror sphere up and to the right

The camera sits at the origin looking down -Z with a 90 degree vertical
field of view and renders 1024x768 pixels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.scene.default_scene import create_default_scene
    >>> from tinytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import math

from tinytracer.camera.pinhole import PinholeCamera
from tinytracer.geometry.checkerboard import CheckerboardConfig, ParityMode
from tinytracer.scene.manager import SceneConfig, SceneManager

# =============================================================================
# Default Scene Constants
# =============================================================================

DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768
DEFAULT_FOV = math.pi / 2.0

# (center, radius, preset name)
SPHERES: list[tuple[tuple[float, float, float], float, str]] = [
    ((-3.0, 0.0, -16.0), 2.0, "ivory"),
    ((-1.0, -1.5, -12.0), 2.0, "glass"),
    ((1.5, -0.5, -18.0), 3.0, "red_rubber"),
    ((7.0, 5.0, -18.0), 4.0, "mirror"),
]

# (position, intensity)
LIGHTS: list[tuple[tuple[float, float, float], float]] = [
    ((-20.0, 20.0, 20.0), 1.5),
    ((30.0, 50.0, -25.0), 1.8),
    ((30.0, 20.0, 30.0), 1.7),
]


def default_scene_config(parity: ParityMode = "legacy") -> SceneConfig:
    """Describe the default scene as a SceneConfig.

    Each sphere gets its own material entry so the config can be edited
    per sphere after export.

    Args:
        parity: Checkerboard tile parity rule.

    Returns:
        The scene configuration.
    """
    config = SceneConfig()
    for material_id, (center, radius, preset) in enumerate(SPHERES):
        config.materials.append({"preset": preset})
        config.spheres.append(
            {"center": list(center), "radius": radius, "material_id": material_id}
        )
    for position, intensity in LIGHTS:
        config.lights.append({"position": list(position), "intensity": intensity})
    config.checkerboard = CheckerboardConfig(parity=parity).to_dict()
    return config


def create_default_scene(
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    fov: float = DEFAULT_FOV,
    parity: ParityMode = "legacy",
) -> tuple[SceneManager, PinholeCamera]:
    """Create the default scene and its camera.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in radians.
        parity: Checkerboard tile parity rule.

    Returns:
        Tuple of (SceneManager, PinholeCamera). The scene is already
        uploaded; call setup_camera(camera) before rendering.
    """
    scene = SceneManager()
    scene.from_config(default_scene_config(parity))
    camera = PinholeCamera(width=width, height=height, fov=fov)
    return scene, camera
