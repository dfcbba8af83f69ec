"""Thin-lens camera model with anti-aliasing and depth of field.

The camera is configured by a plain dataclass and turned into derived state
once, on the Python side, before any rendering starts. The derived state is
stored in Taichi fields and read (never written) by the ray generators.

Derived state:
- The orthonormal basis (u, v, w) built from the view parameters:
  w points from lookat toward lookfrom (opposite the view direction),
  u = unit(vup x w) points right and v = w x u points up.
- The viewport, a rectangle on the focus plane at focus_dist in front of the
  camera, with height 2 * tan(vfov / 2) * focus_dist and the image's width
  to height ratio.
- The per-pixel step vectors across and down the viewport, and the location
  of the centre of pixel (0, 0), which is the upper-left corner.
- The defocus disk basis, u and v scaled by
  focus_dist * tan(defocus_angle / 2).

A defocus angle of 0 gives a pinhole camera: every ray starts at lookfrom and
everything is in focus.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     defocus_angle=0.6,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>> # Inside a kernel: origin, direction, state = get_ray(i, j, state)
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti

from weekend_tracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3
from weekend_tracer.core.sampler import random_real

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (depth of field) camera.

    Attributes:
        aspect_ratio: Ratio of image width over height.
        image_width: Rendered image width in pixel count.
        samples_per_pixel: Count of random samples for each pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical view angle (field of view) in degrees.
        lookfrom: Point the camera is looking from.
        lookat: Point the camera is looking at.
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in
            degrees. 0 disables depth of field.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    @property
    def image_height(self) -> int:
        """Rendered image height, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Defocus disk basis
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_angle = ti.field(dtype=ti.f64, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def validate_camera(camera: ThinLensCamera) -> None:
    """Check a camera configuration.

    Raises:
        ValueError: If any parameter is out of range or the view
            parameters do not define an orientation.
    """
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if camera.image_width < 1:
        raise ValueError(f"image_width must be at least 1, got {camera.image_width}")
    if camera.samples_per_pixel < 1:
        raise ValueError(
            f"samples_per_pixel must be at least 1, got {camera.samples_per_pixel}"
        )
    if camera.max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {camera.max_depth}")
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.defocus_angle < 0.0:
        raise ValueError(f"defocus_angle must be non-negative, got {camera.defocus_angle}")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"focus_dist must be positive, got {camera.focus_dist}")

    view = np.asarray(camera.lookfrom, dtype=np.float64) - np.asarray(
        camera.lookat, dtype=np.float64
    )
    if np.linalg.norm(view) == 0.0:
        raise ValueError("lookfrom and lookat must be different points")
    if np.linalg.norm(np.cross(np.asarray(camera.vup, dtype=np.float64), view)) == 0.0:
        raise ValueError("vup must not be parallel to the view direction")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera basis, viewport geometry and defocus disk, and
    stores them in Taichi fields. Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid (see validate_camera).
    """
    validate_camera(camera)

    image_width = camera.image_width
    image_height = camera.image_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # Viewport dimensions on the focus plane
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * camera.focus_dist
    viewport_width = viewport_height * (image_width / image_height)

    # Orthonormal basis
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = (
        lookfrom - camera.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = camera.focus_dist * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = lookfrom.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()
    _defocus_angle[None] = camera.defocus_angle
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def pixel_center(pixel_i: ti.i32, pixel_j: ti.i32) -> vec3:
    """World-space centre of pixel (i, j); j grows downward."""
    return (
        _pixel00_loc[None]
        + ti.cast(pixel_i, ti.f64) * _pixel_delta_u[None]
        + ti.cast(pixel_j, ti.f64) * _pixel_delta_v[None]
    )


@ti.func
def defocus_disk_sample(state: ti.i32):
    """Random point on the camera defocus disk.

    Returns:
        A tuple (point, new_state).
    """
    p, rng = random_in_unit_disk(state)
    point = _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]
    return point, rng


@ti.func
def get_pixel_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Ray from the camera centre through the centre of pixel (i, j).

    No jitter and no defocus; useful for deterministic probes.
    """
    origin = _camera_center[None]
    return make_ray(origin, pixel_center(pixel_i, pixel_j) - origin)


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, state: ti.i32):
    """Generate a sample ray for pixel (i, j).

    The ray targets a point uniformly jittered within [-0.5, 0.5) pixel
    steps of the pixel centre along both axes. It originates from the camera
    centre, or from a random point on the defocus disk when the defocus
    angle is positive.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        state: The current random state.

    Returns:
        A tuple (origin, direction, new_state). The direction is not
        normalized.
    """
    offset_x, rng = random_real(state)
    offset_y, rng = random_real(rng)

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f64) + offset_x - 0.5) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f64) + offset_y - 0.5) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        origin, rng = defocus_disk_sample(rng)

    return origin, pixel_sample - origin, rng


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera centre (lookfrom) in world space."""
    return _camera_center[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors.

    Returns:
        A tuple (u, v, w) where:
        - u: Right direction in world space
        - v: Up direction in world space
        - w: Backward direction (opposite view direction)
    """
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _field_tuple(value: Any) -> tuple[float, float, float]:
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v, defocus_disk_u, defocus_disk_v (3-tuples) and
        defocus_angle.
    """
    return {
        "center": _field_tuple(_camera_center[None]),
        "u": _field_tuple(_camera_u[None]),
        "v": _field_tuple(_camera_v[None]),
        "w": _field_tuple(_camera_w[None]),
        "pixel00": _field_tuple(_pixel00_loc[None]),
        "pixel_delta_u": _field_tuple(_pixel_delta_u[None]),
        "pixel_delta_v": _field_tuple(_pixel_delta_v[None]),
        "defocus_disk_u": _field_tuple(_defocus_disk_u[None]),
        "defocus_disk_v": _field_tuple(_defocus_disk_v[None]),
        "defocus_angle": float(_defocus_angle[None]),
    }
