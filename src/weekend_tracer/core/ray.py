"""Ray data structure and vector utilities.

This module provides the Ray dataclass, the 64-bit vector type used across the
package, and the vector helpers needed by the shading code. The random
direction generators take an explicit random state (see
``weekend_tracer.core.sampler``) and return the advanced state alongside the
sample, so that every path is reproducible from its seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.core.ray import Ray, ray_at, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # Inside a Taichi kernel: point = ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.sampler import random_real

# Scalar and vector types (double precision throughout)
real = ti.f64
vec3 = ti.types.vector(3, ti.f64)

# Threshold below which every component counts as zero
NEAR_ZERO_EPSILON = 1e-8

# Rejection sampling attempt cap
MAX_REJECTION_ATTEMPTS = 64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length, but must not be zero.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside Taichi scope."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return tm.sqrt(tm.dot(v, v))


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Return v scaled to unit length.

    A zero vector is a caller error and yields NaN components.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, else 0.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes R = I - 2(I . N)N. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta_ratio: real) -> vec3:
    """Refract a unit incident vector through a surface (Snell's law).

    The refracted ray is split into the component perpendicular to the
    normal, eta * (I + cos_theta * N), and the parallel component,
    -sqrt(|1 - |perp|^2|) * N. Callers are expected to rule out total
    internal reflection beforehand.

    Args:
        unit_incident: The incoming direction (unit length).
        normal: The surface normal facing the incident ray (unit length).
        eta_ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction (unit length for valid input).
    """
    cos_theta = tm.min(-tm.dot(unit_incident, normal), 1.0)
    r_out_perp = eta_ratio * (unit_incident + cos_theta * normal)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: real, ref_idx: real) -> real:
    """Compute Fresnel reflectance using Schlick's approximation.

    r0 = ((1 - n) / (1 + n))^2 and R = r0 + (1 - r0)(1 - cos)^5. The result
    is the same for a ratio and its reciprocal.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Index of refraction (or ratio of indices).

    Returns:
        The approximate Fresnel reflectance in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(state: ti.i32, lo: real, hi: real):
    """Generate a vector with each component uniform in [lo, hi).

    Returns:
        A tuple (vector, new_state).
    """
    rng = state
    x, rng = random_real(rng)
    y, rng = random_real(rng)
    z, rng = random_real(rng)
    scale = hi - lo
    return vec3(lo + scale * x, lo + scale * y, lo + scale * z), rng


@ti.func
def random_in_unit_sphere(state: ti.i32):
    """Generate a random point inside the unit sphere.

    Uses rejection sampling; candidates extremely close to the origin are
    rejected too so the result can always be normalized.

    Args:
        state: The current random state.

    Returns:
        A tuple (point, new_state) with 0 < |point| < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 1.0e-3)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate, rng = random_vec3(rng, -1.0, 1.0)
            len_sq = length_squared(candidate)
            if len_sq > 1e-160 and len_sq < 1.0:
                p = candidate
                found = True
    return p, rng


@ti.func
def random_unit_vector(state: ti.i32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Returns:
        A tuple (unit_vector, new_state).
    """
    p, rng = random_in_unit_sphere(state)
    return normalize(p), rng


@ti.func
def random_in_unit_disk(state: ti.i32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used to pick ray origins on the camera's defocus disk.

    Returns:
        A tuple (point, new_state) with point = (x, y, 0), x^2 + y^2 < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, rng = random_real(rng)
            y, rng = random_real(rng)
            candidate = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 0.0)
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = True
    return p, rng
