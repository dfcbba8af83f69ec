"""Camera module for view setup and primary ray generation.

Components:
    thin_lens: Look-at camera with anti-aliasing jitter and an optional
        defocus disk for depth of field

Pixel coordinates run from the upper-left corner: i grows to the right and
j grows downward.
"""

from .thin_lens import (
    ThinLensCamera,
    defocus_disk_sample,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_pixel_ray,
    get_ray,
    is_camera_initialized,
    pixel_center,
    setup_camera,
    validate_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "validate_camera",
    "is_camera_initialized",
    "pixel_center",
    "defocus_disk_sample",
    "get_pixel_ray",
    "get_ray",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
