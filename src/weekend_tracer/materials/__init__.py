"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)

Each material provides a ``scatter_*`` Taichi function returning
``(scattered_direction, attenuation, did_scatter, state)`` and a field-backed
registry (``add_*_material``, ``clear_*_materials``) indexed by the
per-type material index. ``weekend_tracer.scene.manager`` maps unified
material IDs onto these registries.
"""

# Dielectric (glass/water) material
from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)

# Lambertian (ideal diffuse) material
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
    scatter_lambertian_by_id,
)

# Metal (specular reflective) material
from .metal import (
    MetalMaterial,
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "LambertianMaterial",
    "lambertian_direction",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "MetalMaterial",
    "clamp_fuzz",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "DielectricMaterial",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "will_reflect",
]
