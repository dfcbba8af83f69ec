"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, the HitRecord and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) that fill a HitRecord:
    rec = hit_sphere(ray, sphere, ray_t)
"""

from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
    make_sphere,
    set_face_normal,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "set_face_normal",
]
