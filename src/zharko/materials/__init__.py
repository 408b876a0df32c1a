"""Materials module for light scattering models.

This module implements the three surface models supported by the renderer:

Components:
    lambertian: Ideal diffuse reflection (always scatters)
    metal: Mirror reflection with optional fuzz (absorbs rays scattered below
        the surface)
    dielectric: Glass-like refraction with Schlick reflectance (always scatters)

Each material provides a scatter function with the contract:

    scatter(...) -> (scattered_direction, attenuation, did_scatter, state)

taking and returning the caller's random stream state, plus a parameter
registry (add_*/clear_*/get_*) stored in Taichi fields.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_index,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
    will_reflect,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    diffuse_direction,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    validate_albedo,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "diffuse_direction",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "validate_albedo",
    # Metal
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_index",
    "fresnel_reflectance",
    "refraction_ratio",
    "will_reflect",
]
