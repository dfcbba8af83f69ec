"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord produced by every
intersection test, and the half-b form of the ray-sphere quadratic.

A sphere may have a negative radius. The intersection is unchanged (only
radius^2 enters the quadratic) but the outward normal (p - center) / radius
flips, turning the sphere inside out. Pairing a sphere of radius r with one
of radius -r' at the same center builds a hollow glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.interval import Interval, interval_surrounds
from weekend_tracer.core.ray import Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius. Negative values invert the outward normal.
        material_id: Unified material ID of the sphere's surface.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
            All other fields are only valid if hit == 1.
        t: The ray parameter at the intersection.
        point: The 3D intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray arrived from the outward side of the surface
            (dot(direction, outward_normal) < 0), 0 otherwise.
        material_id: The material ID of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). When the ray hits the back face the
        normal is the negated outward normal, so shading code can always
        treat the normal as facing the side the ray came from.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2 in half-b form:

        a = dot(direction, direction)
        h = dot(oc, direction)            (oc = origin - center)
        c = dot(oc, oc) - radius^2
        discriminant = h^2 - a*c
        t = (-h -/+ sqrt(discriminant)) / a

    The nearer root is accepted if it lies strictly inside ray_t, otherwise
    the farther root is tried.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        A HitRecord; check its hit field to determine if an intersection
        occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = tm.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray.direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> Sphere:
    """Create a sphere inside Taichi scope."""
    return Sphere(center=center, radius=radius, material_id=material_id)
