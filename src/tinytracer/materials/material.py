"""Whitted material model and material registry.

A material describes how a surface combines four light contributions. Its
albedo is not a reflectance color but a 4-component weighting vector:

    color = diffuse_color * albedo[0] * diffuse_intensity
          + white         * albedo[1] * specular_intensity
          + reflected     * albedo[2]
          + refracted     * albedo[3]

The weights are independent and are not required to sum to one; the mirror
preset uses a specular weight of 10 to get a sharp, bright highlight.

Materials are registered once at scene-setup time into Taichi fields and
looked up by id from within kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.material import GLASS, add_material
    >>> glass_id = add_material(GLASS)
    >>> # Use get_material(glass_id) within a Taichi kernel
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type aliases
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class Material:
    """Optical properties of a surface (GPU-side).

    Attributes:
        refractive_index: Index of refraction used for transmitted rays.
        albedo: Weights for (diffuse, specular, reflection, refraction).
        diffuse_color: Base RGB color scaled by the diffuse intensity.
        specular_exponent: Phong exponent controlling highlight size.
    """

    refractive_index: ti.f32
    albedo: vec4
    diffuse_color: vec3
    specular_exponent: ti.f32


@dataclass(frozen=True)
class MaterialParams:
    """Host-side description of a material.

    Attributes:
        refractive_index: Index of refraction (must be positive).
        albedo: Weights for (diffuse, specular, reflection, refraction).
        diffuse_color: Base RGB color.
        specular_exponent: Phong exponent (must be non-negative).
    """

    refractive_index: float
    albedo: tuple[float, float, float, float]
    diffuse_color: tuple[float, float, float]
    specular_exponent: float

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "refractive_index": self.refractive_index,
            "albedo": list(self.albedo),
            "diffuse_color": list(self.diffuse_color),
            "specular_exponent": self.specular_exponent,
        }


# =============================================================================
# Material Presets
# =============================================================================

IVORY = MaterialParams(1.0, (0.6, 0.3, 0.1, 0.0), (0.4, 0.4, 0.3), 50.0)
GLASS = MaterialParams(1.5, (0.0, 0.5, 0.1, 0.8), (0.6, 0.7, 0.8), 125.0)
RED_RUBBER = MaterialParams(1.0, (0.9, 0.1, 0.0, 0.0), (0.3, 0.1, 0.1), 10.0)
MIRROR = MaterialParams(1.0, (0.0, 10.0, 0.8, 0.0), (1.0, 1.0, 1.0), 1425.0)

PRESETS: dict[str, MaterialParams] = {
    "ivory": IVORY,
    "glass": GLASS,
    "red_rubber": RED_RUBBER,
    "mirror": MIRROR,
}


def validate_material(params: MaterialParams) -> None:
    """Check that a material can be shaded without dividing by zero.

    Raises:
        ValueError: If the refractive index is not positive, the specular
            exponent is negative, or a vector has the wrong length.
    """
    if len(params.albedo) != 4:
        raise ValueError(f"Albedo must have 4 components, got {len(params.albedo)}")
    if len(params.diffuse_color) != 3:
        raise ValueError(
            f"Diffuse color must have 3 components, got {len(params.diffuse_color)}"
        )
    if params.refractive_index <= 0.0:
        raise ValueError(
            f"Refractive index = {params.refractive_index} must be positive."
        )
    if params.specular_exponent < 0.0:
        raise ValueError(
            f"Specular exponent = {params.specular_exponent} must be non-negative."
        )


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 256

material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(4, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_specular_exponents = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all registered materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(params: MaterialParams) -> int:
    """Add a material to the registry.

    Args:
        params: The material description.

    Returns:
        The id of the added material.

    Raises:
        ValueError: If the material parameters are invalid.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_material(params)

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_refractive_indices[idx] = params.refractive_index
    material_albedos[idx] = list(params.albedo)
    material_diffuse_colors[idx] = list(params.diffuse_color)
    material_specular_exponents[idx] = params.specular_exponent
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Look up a registered material by id.

    Args:
        material_id: The id returned by add_material.

    Returns:
        The Material stored at that id.
    """
    return Material(
        refractive_index=material_refractive_indices[material_id],
        albedo=material_albedos[material_id],
        diffuse_color=material_diffuse_colors[material_id],
        specular_exponent=material_specular_exponents[material_id],
    )


@ti.func
def make_checkerboard_material(color: vec3) -> Material:
    """Build the purely diffuse material of a checkerboard tile.

    The floor neither reflects, refracts nor shows highlights; only its
    diffuse color contributes.

    Args:
        color: The (already dimmed) tile color.

    Returns:
        A Material with albedo (1, 0, 0, 0).
    """
    return Material(
        refractive_index=1.0,
        albedo=vec4(1.0, 0.0, 0.0, 0.0),
        diffuse_color=color,
        specular_exponent=1.0,
    )
