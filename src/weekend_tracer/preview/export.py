"""Image export utilities for rendered images.

This module is the colour output stage. The render kernels hand over
accumulated (summed) linear RGB; turning that into pixels takes four steps:

1. Divide by the number of samples per pixel.
2. Gamma correct with gamma 2 (square root of each channel).
3. Clamp to the intensity interval [0, 0.999].
4. Quantize to 8 bits as int(255.999 * value).

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - PPM (plain-text P3)

Example:
    >>> from weekend_tracer.preview.export import resolve_image, image_to_uint8, save_image
    >>> image = image_to_uint8(resolve_image(accumulated, samples_per_pixel=10))
    >>> save_image(image, "output.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from weekend_tracer.core.interval import INTENSITY_MAX, INTENSITY_MIN

# Quantization scale mapping [0, 0.999] onto 0..255
QUANTIZATION_SCALE = 255.999

# Supported output file extensions
SUPPORTED_EXTENSIONS = (".png", ".ppm")


def linear_to_gamma(
    image: npt.NDArray[np.floating[npt.NBitBase]],
) -> npt.NDArray[np.float64]:
    """Apply gamma 2 encoding; non-positive values map to 0."""
    linear = np.asarray(image, dtype=np.float64)
    return np.sqrt(np.maximum(linear, 0.0))


def resolve_image(
    accumulated: npt.NDArray[np.floating[npt.NBitBase]],
    samples_per_pixel: int,
) -> npt.NDArray[np.float64]:
    """Turn summed sample colours into display values.

    Args:
        accumulated: Summed linear RGB, shape (H, W, 3).
        samples_per_pixel: Number of samples in each sum.

    Returns:
        Averaged, gamma-corrected image clamped to [0, 0.999].

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")

    averaged = np.asarray(accumulated, dtype=np.float64) * (1.0 / samples_per_pixel)
    return np.clip(linear_to_gamma(averaged), INTENSITY_MIN, INTENSITY_MAX)


def image_to_uint8(
    image: npt.NDArray[np.floating[npt.NBitBase]],
) -> npt.NDArray[np.uint8]:
    """Quantize a display image in [0, 1) to 8 bits.

    Values are clamped to [0, 0.999] before scaling, so the result never
    exceeds 255.

    Args:
        image: Display-space image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), INTENSITY_MIN, INTENSITY_MAX)
    return (QUANTIZATION_SCALE * clamped).astype(np.uint8)


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit image as plain-text PPM (P3).

    Pixels are written row by row from the top, one pixel per line.

    Args:
        image: 8-bit image array of shape (H, W, 3).
        stream: Text stream to write to.
    """
    height, width = image.shape[0], image.shape[1]
    stream.write(f"P3\n{width} {height}\n255\n")
    for row in image:
        for pixel in row:
            stream.write(f"{int(pixel[0])} {int(pixel[1])} {int(pixel[2])}\n")


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image, stream)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a PNG file."""
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8), mode="RGB")
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Save an 8-bit image, choosing the format from the file extension.

    Args:
        image: 8-bit image array of shape (H, W, 3).
        filepath: Output path ending in .png or .ppm.

    Returns:
        The path written.

    Raises:
        ValueError: If the extension is not supported.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix == ".png":
        save_png(image, path)
    elif suffix == ".ppm":
        save_ppm(image, path)
    else:
        raise ValueError(
            f"Unsupported image format '{suffix}', expected one of {SUPPORTED_EXTENSIONS}"
        )
    return path


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
