"""Matplotlib windows for looking at renders.

    >>> renderer = Renderer(camera, seed=1)
    >>> renderer.render()
    >>> show_preview(renderer)

pyplot is imported inside each function so that headless exports never
pull in a GUI backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from weekend_tracer.preview.export import compute_rmse

if TYPE_CHECKING:
    from weekend_tracer.core.renderer import Renderer

ImageArray = npt.NDArray[np.floating[npt.NBitBase]]


def _panel(ax, image: ImageArray, title: str) -> None:
    ax.imshow(image)
    ax.set_title(title)
    ax.axis("off")


def show_preview(
    renderer: Renderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Open a window with the renderer's gamma-corrected image.

    Without ``title`` the caption reports resolution and samples per pixel.
    Pass ``block=False`` to return immediately after drawing.
    """
    import matplotlib.pyplot as plt

    if title is None:
        title = (
            f"Render Preview - {renderer.width}x{renderer.height}, "
            f"{renderer.camera.samples_per_pixel} SPP"
        )

    _, ax = plt.subplots(figsize=figsize)
    _panel(ax, renderer.get_image_numpy(), title)
    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: ImageArray,
    image_b: ImageArray,
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Plot two display-space images next to their amplified difference.

    Both inputs are (H, W, 3) arrays with values in [0, 1]. The third panel
    shows ``|a - b| * diff_scale`` clipped to [0, 1], which makes sampling
    noise visible between two renders of the same scene.

    Returns:
        Root mean squared error between the images.

    Raises:
        ValueError: The two arrays differ in shape.
    """
    import matplotlib.pyplot as plt

    rmse = compute_rmse(image_a, image_b)
    delta = np.abs(
        np.asarray(image_a, dtype=np.float64) - np.asarray(image_b, dtype=np.float64)
    )

    _, axes = plt.subplots(1, 3, figsize=figsize)
    _panel(axes[0], np.clip(image_a, 0.0, 1.0), labels[0])
    _panel(axes[1], np.clip(image_b, 0.0, 1.0), labels[1])
    _panel(
        axes[2],
        np.clip(delta * diff_scale, 0.0, 1.0),
        f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}",
    )
    plt.tight_layout()
    plt.show(block=block)
    return rmse
