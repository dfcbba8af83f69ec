"""Closed numeric ranges used to bound hit parameters and intensities.

An Interval bounds the ray parameter accepted by intersection tests: the
lower bound rejects hits at the ray's own origin (shadow acne), the upper
bound is shrunk to the closest hit found so far during scene traversal.
"""

import math

import taichi as ti

# Ray parameter range used by the shading integrator
T_MIN = 0.001
T_MAX = math.inf

# Output intensity range applied before 8-bit quantization
INTENSITY_MIN = 0.0
INTENSITY_MAX = 0.999


@ti.dataclass
class Interval:
    """A closed range [min_val, max_val] with min_val <= max_val.

    Attributes:
        min_val: Lower bound.
        max_val: Upper bound.
    """

    min_val: ti.f64
    max_val: ti.f64


@ti.func
def make_interval(min_val: ti.f64, max_val: ti.f64) -> Interval:
    """Create an interval inside Taichi scope."""
    return Interval(min_val=min_val, max_val=max_val)


@ti.func
def interval_size(interval: Interval) -> ti.f64:
    """Return max_val - min_val."""
    return interval.max_val - interval.min_val


@ti.func
def interval_contains(interval: Interval, x: ti.f64) -> ti.i32:
    """Return 1 if min_val <= x <= max_val (bounds included)."""
    return interval.min_val <= x and x <= interval.max_val


@ti.func
def interval_surrounds(interval: Interval, x: ti.f64) -> ti.i32:
    """Return 1 if min_val < x < max_val (bounds excluded)."""
    return interval.min_val < x and x < interval.max_val


@ti.func
def interval_clamp(interval: Interval, x: ti.f64) -> ti.f64:
    """Clamp x into [min_val, max_val]."""
    result = x
    if x < interval.min_val:
        result = interval.min_val
    if x > interval.max_val:
        result = interval.max_val
    return result
