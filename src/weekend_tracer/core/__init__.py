"""Core rendering module.

Components:
    sampler: Explicit, seedable random streams
    ray: Ray data structure, vector helpers and random directions
    interval: Closed real intervals used for ray parameters and clamping
    integrator: The ray_colour estimator and the render kernels
    renderer: Host-side driver that accumulates samples into an image

All compute-intensive operations use Taichi kernels.
"""

from .interval import (
    INTENSITY_MAX,
    INTENSITY_MIN,
    T_MAX,
    T_MIN,
    Interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    ray_at,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    hash_state,
    init_sample_state,
    next_state,
    normalize_seed,
    random_range,
    random_real,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports
# (they depend on the scene and camera packages). Import them directly:
#   from weekend_tracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "T_MIN",
    "T_MAX",
    "INTENSITY_MIN",
    "INTENSITY_MAX",
    "hash_state",
    "init_sample_state",
    "next_state",
    "normalize_seed",
    "random_real",
    "random_range",
]
