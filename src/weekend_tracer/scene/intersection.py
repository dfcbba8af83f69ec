"""Scene-level ray intersection over all spheres.

The scene stores its spheres in Taichi fields (structure of arrays) and
answers closest-hit queries: every sphere is tested against an interval
whose upper bound shrinks to the closest hit found so far, so the result is
the globally nearest intersection regardless of insertion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from weekend_tracer.core.interval import Interval, make_interval
from weekend_tracer.core.ray import Ray
from weekend_tracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius. Negative radii are kept as given (hollow spheres).
        material_id: The unified material ID of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load a sphere from scene storage."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Args:
        ray: The ray to trace.
        ray_t: Interval of acceptable ray parameters.

    Returns:
        The HitRecord of the nearest sphere hit inside ray_t (tagged with
        that sphere's material ID), or a miss record.
    """
    closest_so_far = ray_t.max_val
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), make_interval(ray_t.min_val, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
