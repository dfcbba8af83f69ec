"""Reflective metal surfaces.

A metal mirrors the incoming direction D about the unit normal N,

    R = D - 2(D . N)N

and then perturbs R by ``fuzz`` times a random unit vector. With fuzz = 0
the surface is a perfect mirror; larger values give brushed or rough
metal. Perturbed directions that end up below the surface are absorbed,
so rough metals look darker at grazing angles.

Kernel usage:

    direction, attenuation, did_scatter, state = scatter_metal(
        albedo, fuzz, ray_direction, normal, state
    )
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import normalize, random_unit_vector, reflect, vec3
from weekend_tracer.materials._registry import check_albedo, claim_slot


@ti.dataclass
class MetalMaterial:
    albedo: vec3  # per-channel reflectance in [0, 1]
    fuzz: ti.f64  # 0 mirror, 1 roughest


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    state: ti.i32,
):
    """Reflect off a metal, returning (direction, attenuation, did_scatter, state).

    ``incident_direction`` may have any length; ``normal`` must be unit
    length and face the incoming ray. The direction is the mirror
    reflection plus ``fuzz`` times a random unit vector, left unnormalized.
    Attenuation is ``albedo``. ``did_scatter`` is 0 when that direction
    points into the surface, in which case the caller drops the path.
    """
    reflected = reflect(normalize(incident_direction), normal)

    offset, rng = random_unit_vector(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter, rng


# -----------------------------------------------------------------------------
# Metal table: row i holds the albedo and clamped fuzz of metal slot i
# -----------------------------------------------------------------------------

MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clamp_fuzz(fuzz: float) -> float:
    return min(max(fuzz, 0.0), 1.0)


def clear_metal_materials() -> None:
    """Forget every metal; old rows are overwritten as new ones arrive."""
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Append a metal to the table and return its slot.

    ``fuzz`` outside [0, 1] is clamped rather than rejected. Raises
    ValueError for an albedo channel outside [0, 1] and RuntimeError once
    MAX_METAL_MATERIALS slots are taken.
    """
    albedo = check_albedo(albedo)
    slot = claim_slot(num_metal_materials, MAX_METAL_MATERIALS, "metal")
    metal_albedos[slot] = list(albedo)
    metal_fuzzes[slot] = clamp_fuzz(fuzz)
    return slot


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.i32,
):
    """scatter_metal() with albedo and fuzz read from slot ``material_idx``."""
    return scatter_metal(
        get_metal_albedo(material_idx),
        get_metal_fuzz(material_idx),
        incident_direction,
        normal,
        state,
    )
