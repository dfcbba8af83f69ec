"""Preview module for image output and visualization.

Components:
    export: Averaging, gamma correction, 8-bit quantization, PNG/PPM export
    display: Matplotlib-based static preview and comparison

Example:
    >>> from weekend_tracer.preview import save_image, show_preview
    >>> renderer.render()
    >>> save_image(renderer.get_image_uint8(), "output.png")
    >>> show_preview(renderer)
"""

from weekend_tracer.preview.display import show_comparison, show_preview
from weekend_tracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    linear_to_gamma,
    resolve_image,
    save_image,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    # Export functions
    "linear_to_gamma",
    "resolve_image",
    "image_to_uint8",
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
