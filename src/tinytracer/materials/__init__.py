"""Materials module.

Components:
    material: The Whitted material (refractive index, 4-weight albedo,
        diffuse color, specular exponent), presets and the material registry

Each material weights four contributions to the final color: diffuse and
specular light from point lights, and the colors gathered by reflected and
refracted rays. There is no energy conservation; weights are free.
"""

from .material import (
    GLASS,
    IVORY,
    MAX_MATERIALS,
    MIRROR,
    PRESETS,
    RED_RUBBER,
    Material,
    MaterialParams,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
    make_checkerboard_material,
    validate_material,
)

__all__ = [
    "Material",
    "MaterialParams",
    "IVORY",
    "GLASS",
    "RED_RUBBER",
    "MIRROR",
    "PRESETS",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "make_checkerboard_material",
    "validate_material",
]
