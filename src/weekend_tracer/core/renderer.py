"""Renderer driving the render kernels for a configured camera.

The Renderer finalizes the camera's derived state and the render target
before any parallel work begins, then renders the image in batches of
scanlines (top to bottom). After each batch it reports progress, either
through a callback or by yielding from a generator, so a front end can show
how many scanlines remain.

The renderer holds no random generator of its own: every sample's random
stream is derived from (seed, pixel, sample), so two renders with the same
camera, scene and seed produce identical images.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.camera.thin_lens import ThinLensCamera
    >>> from weekend_tracer.core.renderer import Renderer
    >>> from weekend_tracer.scene.manager import SceneManager
    >>> from weekend_tracer.scene.presets import create_two_sphere_scene
    >>>
    >>> create_two_sphere_scene(SceneManager())
    >>> renderer = Renderer(ThinLensCamera(image_width=64), seed=7)
    >>> renderer.render()
    >>> renderer.save_image("spheres.png")
"""

from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera
from weekend_tracer.core.integrator import (
    clear_render_target,
    get_accumulated_image_numpy,
    render_rows,
    setup_render_target,
)
from weekend_tracer.preview.export import image_to_uint8, resolve_image, save_image

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current scene through a thin-lens camera.

    Attributes:
        camera: The camera configuration.
        seed: Seed from which every sample's random stream is derived.
    """

    def __init__(self, camera: ThinLensCamera, seed: int = 0) -> None:
        """Set up camera state and the render target.

        Args:
            camera: Camera configuration (image size, sampling, view).
            seed: The render seed.

        Raises:
            ValueError: If the camera configuration is invalid or the image
                is larger than the render target supports.
        """
        self.camera = camera
        self.seed = seed
        setup_camera(camera)
        setup_render_target(camera.image_width, camera.image_height)
        self._rows_done = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.camera.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.camera.image_height

    @property
    def rows_done(self) -> int:
        """Number of scanlines fully rendered so far."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        """Whether every scanline has been rendered."""
        return self._rows_done >= self.height

    def reset(self) -> None:
        """Clear the accumulated image so the next render starts over."""
        clear_render_target()
        self._rows_done = 0

    def render_progressive(
        self,
        rows_per_batch: int = 16,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining scanlines, yielding after each batch.

        Args:
            rows_per_batch: Number of scanlines rendered per kernel launch.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive.
        """
        if rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        while not self.is_complete:
            row_end = min(self._rows_done + rows_per_batch, self.height)
            render_rows(
                self._rows_done,
                row_end,
                self.camera.samples_per_pixel,
                seed=self.seed,
                max_depth=self.camera.max_depth,
            )
            self._rows_done = row_end
            yield (self._rows_done, self.height)

    def render(
        self,
        callback: ProgressCallback | None = None,
        rows_per_batch: int = 16,
    ) -> npt.NDArray[np.float64]:
        """Render the whole image.

        Args:
            callback: Optional function called after each batch with
                (rows_done, total_rows).
            rows_per_batch: Number of scanlines rendered per kernel launch.

        Returns:
            The accumulated image (see get_accumulated_image).
        """
        for rows_done, total_rows in self.render_progressive(rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)
        return self.get_accumulated_image()

    def get_accumulated_image(self) -> npt.NDArray[np.float64]:
        """Summed linear colour per pixel, shape (height, width, 3).

        Each channel lies in [0, samples_per_pixel].
        """
        return get_accumulated_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Averaged, gamma-corrected and clamped image in [0, 0.999]."""
        return resolve_image(self.get_accumulated_image(), self.camera.samples_per_pixel)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Final 8-bit image, shape (height, width, 3)."""
        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> Path:
        """Save the final image as PNG or PPM (chosen by file extension).

        Returns:
            The path written.
        """
        return save_image(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.camera.samples_per_pixel}, "
            f"rows_done={self.rows_done})"
        )
