"""Matte surfaces with cosine-weighted diffuse scattering.

Adding a random unit vector to the unit normal gives directions whose
density over the hemisphere is proportional to cos(theta). That is the
Lambertian lobe, so the sample needs no further weighting and the
attenuation is just the albedo. When the random vector nearly cancels the
normal the sum is replaced by the normal itself.

Kernel usage:

    direction, attenuation, did_scatter, state = scatter_lambertian(
        albedo, normal, state
    )
"""

import taichi as ti

from weekend_tracer.core.ray import near_zero, random_unit_vector, vec3
from weekend_tracer.materials._registry import check_albedo, claim_slot


@ti.dataclass
class LambertianMaterial:
    albedo: vec3  # per-channel reflectance in [0, 1]


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """``normal + offset``, or ``normal`` itself when that sum is near zero."""
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.i32):
    """Diffuse bounce; returns (direction, albedo, 1, state).

    ``normal`` is the unit normal facing the incoming ray. The direction is
    ``normal`` plus a random unit vector and is not normalized. A diffuse
    surface never absorbs a path outright.
    """
    offset, rng = random_unit_vector(state)
    return lambertian_direction(normal, offset), albedo, 1, rng


# -----------------------------------------------------------------------------
# Lambertian table: row i holds the albedo of diffuse slot i
# -----------------------------------------------------------------------------

MAX_LAMBERTIAN_MATERIALS = 512

lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Append a diffuse material to the table and return its slot.

    Raises ValueError for an albedo channel outside [0, 1] and RuntimeError
    once MAX_LAMBERTIAN_MATERIALS slots are taken.
    """
    albedo = check_albedo(albedo)
    slot = claim_slot(num_lambertian_materials, MAX_LAMBERTIAN_MATERIALS, "Lambertian")
    lambertian_albedos[slot] = list(albedo)
    return slot


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3, state: ti.i32):
    """scatter_lambertian() with the albedo read from slot ``material_idx``."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal, state)
