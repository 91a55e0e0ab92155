"""Scene module for scene management and ray-scene queries.

Components:
    lights: Point light storage
    intersection: Sphere storage, nearest-hit and shadow queries
    manager: Scene manager coordinating materials, spheres, lights and floor
    default_scene: The four-sphere demo scene

Scene data lives in module-level Taichi fields (Structure-of-Arrays layout)
that are written on the host before rendering and only read by kernels.
"""

from .default_scene import (
    LIGHTS,
    SPHERES,
    create_default_scene,
    default_scene_config,
)
from .intersection import (
    FAR_CLIP,
    MAX_SPHERES,
    SceneHit,
    add_sphere,
    clear_scene,
    get_sphere_count,
    scene_intersect,
    scene_occluded,
)
from .lights import MAX_LIGHTS, PointLight, add_light, clear_lights, get_light_count

# Scene manager for coordinating materials and primitives
from .manager import (
    LightInfo,
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    load_scene_config,
    material_from_dict,
    scene_config_from_dict,
)

__all__ = [
    # Lights module
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Intersection module
    "SceneHit",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "scene_intersect",
    "scene_occluded",
    "FAR_CLIP",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "LightInfo",
    "material_from_dict",
    "scene_config_from_dict",
    "load_scene_config",
    # Default scene module
    "create_default_scene",
    "default_scene_config",
    "SPHERES",
    "LIGHTS",
]
