"""Scene manager for building, loading and saving scenes.

This module provides a high-level scene API that coordinates the material
registry, sphere storage, point lights and the checkerboard floor. It keeps
a host-side record of everything it uploads so that a scene can be exported
to a SceneConfig (or JSON) and loaded back.

The SceneManager maintains:
- Material ids in the material registry
- SphereInfo / LightInfo records mirroring the Taichi fields
- The active checkerboard configuration
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.material import IVORY
    >>> from tinytracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ivory = scene.add_material(IVORY)
    >>> scene.add_sphere(center=(-3, 0, -16), radius=2, material_id=ivory)
    >>> scene.add_light(position=(-20, 20, 20), intensity=1.5)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from tinytracer.geometry.checkerboard import (
    CheckerboardConfig,
    disable_checkerboard,
    setup_checkerboard,
)
from tinytracer.materials.material import (
    MAX_MATERIALS,
    PRESETS,
    MaterialParams,
    add_material,
    clear_materials,
    get_material_count,
)
from tinytracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)
from tinytracer.scene.lights import MAX_LIGHTS, add_light, get_light_count


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The id in the material registry.
        params: The material parameters as provided during creation.
    """

    material_id: int
    params: MaterialParams


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light in the scene."""

    light_index: int
    position: tuple[float, float, float]
    intensity: float


@dataclass
class SceneConfig:
    """Plain-data description of a scene.

    Materials are dictionaries with either a "preset" key naming one of the
    built-in materials or the four material parameters. Spheres reference
    materials by their position in the materials list.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        lights: List of light configurations.
        checkerboard: Floor configuration, or None for a scene without floor.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    checkerboard: dict[str, Any] | None = None


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def material_from_dict(data: dict[str, Any]) -> MaterialParams:
    """Build MaterialParams from a material configuration dictionary.

    Args:
        data: Either {"preset": name} or a dict with refractive_index,
            albedo, diffuse_color and specular_exponent.

    Returns:
        The material parameters.

    Raises:
        ValueError: If the preset is unknown or a parameter is missing.
    """
    if "preset" in data:
        preset = str(data["preset"]).lower()
        if preset not in PRESETS:
            raise ValueError(f"Unknown material preset: {preset}")
        return PRESETS[preset]

    try:
        albedo = data["albedo"]
        if len(albedo) != 4:
            raise ValueError(f"Albedo must have 4 components, got {len(albedo)}")
        return MaterialParams(
            refractive_index=float(data["refractive_index"]),
            albedo=(float(albedo[0]), float(albedo[1]), float(albedo[2]), float(albedo[3])),
            diffuse_color=_as_vec3(data["diffuse_color"], "Diffuse color"),
            specular_exponent=float(data["specular_exponent"]),
        )
    except KeyError as e:
        raise ValueError(f"Material is missing parameter {e}") from e


class SceneManager:
    """Scene manager coordinating materials, spheres, lights and the floor.

    The Taichi scene fields are shared by every manager, and creating a
    SceneManager clears them. A manager keeps its own host-side record, so
    upload() restores its scene after another manager has replaced it.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of LightInfo for all lights in the scene.
        checkerboard: The floor configuration (enabled=False without floor).

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_material(GLASS)
        >>> scene.add_sphere((-1, -1.5, -12), 2, glass)
        >>> scene.add_light((30, 50, -25), 1.8)
        >>> scene.set_checkerboard(CheckerboardConfig(parity="floor"))
    """

    def __init__(self) -> None:
        """Initialize an empty scene with the default floor."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self.checkerboard = CheckerboardConfig()
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        # Spheres, lights and floor
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()
        self.checkerboard = CheckerboardConfig()

    def clear(self) -> None:
        """Clear the entire scene and restore the default floor."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, params: MaterialParams) -> int:
        """Register a material.

        Args:
            params: The material parameters.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the parameters are invalid.
        """
        material_id = add_material(params)
        self.materials.append(MaterialInfo(material_id=material_id, params=params))
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material_id: A material ID returned by add_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius = {radius} must be positive.")

        center = _as_vec3(center, "Sphere center")
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_light(self, position: tuple[float, float, float], intensity: float) -> int:
        """Add a point light to the scene.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If the intensity is negative.
        """
        position = _as_vec3(position, "Light position")
        light_index = add_light(position, intensity)
        self.lights.append(
            LightInfo(light_index=light_index, position=position, intensity=float(intensity))
        )
        return light_index

    def set_checkerboard(self, config: CheckerboardConfig | None) -> None:
        """Configure the checkerboard floor, or remove it with None.

        Raises:
            ValueError: If the configuration is invalid.
        """
        if config is None:
            disable_checkerboard()
            self.checkerboard = replace(self.checkerboard, enabled=False)
        else:
            setup_checkerboard(config)
            self.checkerboard = config

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_checkerboard(self) -> CheckerboardConfig:
        """Get the floor configuration of this scene."""
        return self.checkerboard

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials, spheres and lights.
        """
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(mat.params.to_dict())

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for light in self.lights:
            config.lights.append(
                {"position": list(light.position), "intensity": light.intensity}
            )

        if self.checkerboard.enabled:
            config.checkerboard = self.checkerboard.to_dict()

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Load materials first (needed for spheres)
        for mat_config in config.materials:
            self.add_material(material_from_dict(mat_config))

        for sphere_config in config.spheres:
            try:
                center = sphere_config["center"]
                radius = float(sphere_config["radius"])
                material_id = int(sphere_config["material_id"])
            except KeyError as e:
                raise ValueError(f"Sphere is missing parameter {e}") from e
            self.add_sphere(_as_vec3(center, "Sphere center"), radius, material_id)

        for light_config in config.lights:
            try:
                position = light_config["position"]
                intensity = float(light_config["intensity"])
            except KeyError as e:
                raise ValueError(f"Light is missing parameter {e}") from e
            self.add_light(_as_vec3(position, "Light position"), intensity)

        if config.checkerboard is None:
            self.set_checkerboard(None)
        else:
            self.set_checkerboard(CheckerboardConfig.from_dict(config.checkerboard))

    def upload(self) -> None:
        """Write this scene back into the Taichi fields.

        Needed when another SceneManager has been created or populated since
        this one was built, because the fields only hold the latest upload.
        """
        self.from_config(self.to_config())

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "lights": config.lights,
            "checkerboard": config.checkerboard,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'lights' and
                optionally 'checkerboard' keys.
        """
        self.from_config(scene_config_from_dict(data))

    def save_json(self, filepath: str | Path) -> None:
        """Write the scene to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def load_json(self, filepath: str | Path) -> None:
        """Load the scene from a JSON file.

        Raises:
            ValueError: If the file is not valid JSON or the scene is invalid.
        """
        self.from_config(load_scene_config(filepath))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS


def scene_config_from_dict(data: dict[str, Any]) -> SceneConfig:
    """Build a SceneConfig from a dictionary.

    A missing "checkerboard" key gives the default floor; an explicit null
    gives a scene without floor.
    """
    checkerboard = data.get("checkerboard", CheckerboardConfig().to_dict())
    return SceneConfig(
        materials=list(data.get("materials", [])),
        spheres=list(data.get("spheres", [])),
        lights=list(data.get("lights", [])),
        checkerboard=checkerboard,
    )


def load_scene_config(filepath: str | Path) -> SceneConfig:
    """Read a SceneConfig from a JSON file.

    Raises:
        ValueError: If the file does not contain a JSON object.
    """
    with open(filepath, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {filepath}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {filepath} must contain a JSON object")
    return scene_config_from_dict(data)
