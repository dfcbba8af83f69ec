"""Clear refractive surfaces such as glass and water.

Refraction follows Snell's law,

    eta_i * sin(theta_i) = eta_t * sin(theta_t)

and has no solution once eta_i / eta_t * sin(theta_i) exceeds 1; the ray
is then totally internally reflected. In every other case one random draw
picks reflection with the Schlick estimate of the Fresnel reflectance, and
refraction otherwise. Nothing is absorbed, so attenuation is (1, 1, 1).

An ior below 1 models a thinner medium inside a denser one, such as an
air bubble in water (ior = 1 / 1.33).

Kernel usage:

    direction, attenuation, did_scatter, state = scatter_dielectric(
        ior, ray_direction, normal, front_face, state
    )
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import (
    normalize,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from weekend_tracer.core.sampler import random_real
from weekend_tracer.materials._registry import claim_slot


@ti.dataclass
class DielectricMaterial:
    ior: ti.f64  # relative to the enclosing medium


@ti.func
def refraction_ratio_for(ior: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio eta_incident / eta_transmitted for a hit on a dielectric."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.i32,
):
    """Compute the scattered ray direction for a dielectric material.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it is leaving.
        state: The current random state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state):
        - scattered_direction: The reflected or refracted direction.
        - attenuation: Always (1, 1, 1).
        - did_scatter: Always 1.
        - state: The advanced random state (one draw is consumed).
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))

    u, rng = random_real(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    cannot_refract = ratio * sin_theta > 1.0
    if cannot_refract or schlick_reflectance(cos_theta, ratio) > u:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1, rng


@ti.func
def will_reflect(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 when Snell's law has no solution for this hit, else 0.

    Both vectors must be unit length, with ``normal`` facing the ray.
    ``front_face`` is 1 for a ray entering the material from outside.
    """
    ratio = refraction_ratio_for(ior, front_face)

    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))

    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f64:
    """Schlick reflectance for a hit on a dielectric.

    Returns:
        The Fresnel reflectance coefficient in [0, 1].
    """
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


# -----------------------------------------------------------------------------
# Dielectric table: row i holds the refractive index of glass slot i
# -----------------------------------------------------------------------------

MAX_DIELECTRIC_MATERIALS = 256

dielectric_iors = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Append a dielectric to the table and return its slot.

    Typical indices: water 1.33, window glass 1.5, diamond 2.4. Any
    positive value is accepted, including values below 1 for a pocket of
    thinner medium. Raises ValueError when ``ior <= 0`` and RuntimeError
    once MAX_DIELECTRIC_MATERIALS slots are taken.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction must be positive, got {ior}")
    slot = claim_slot(num_dielectric_materials, MAX_DIELECTRIC_MATERIALS, "dielectric")
    dielectric_iors[slot] = ior
    return slot


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f64:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.i32,
):
    """scatter_dielectric() with the index read from slot ``material_idx``."""
    return scatter_dielectric(
        get_dielectric_ior(material_idx), incident_direction, normal, front_face, state
    )
