"""Colour estimator and render kernels.

This module turns camera rays into colours. ``ray_colour`` evaluates

    colour(ray, depth) = black                                  if depth == 0
                       = background(ray)                        on a miss
                       = black                                  if absorbed
                       = attenuation * colour(scattered, depth - 1)  otherwise

Taichi functions cannot recurse, so the recursion is unrolled into a loop
that carries the product of attenuations along the path (the throughput).
A path that is still bouncing when the depth budget runs out contributes
black, exactly as the recursive form does.

Intersections are searched in (T_MIN, T_MAX) with T_MIN = 0.001; the small
positive lower bound keeps a freshly scattered ray from re-hitting the
surface it starts on.

Samples are summed, not averaged: the render target holds accumulated
linear RGB in [0, samples] per channel. Averaging, gamma and quantization
belong to the output stage (weekend_tracer.preview.export).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> from weekend_tracer.core.integrator import render_image, setup_render_target
    >>> from weekend_tracer.scene.manager import SceneManager
    >>> from weekend_tracer.scene.presets import create_two_sphere_scene
    >>>
    >>> create_two_sphere_scene(SceneManager())
    >>> camera = ThinLensCamera(image_width=64)
    >>> setup_camera(camera)
    >>> setup_render_target(camera.image_width, camera.image_height)
    >>> render_image(samples=4, seed=1, max_depth=10)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from weekend_tracer.camera.thin_lens import get_ray
from weekend_tracer.core.interval import T_MAX, T_MIN, make_interval
from weekend_tracer.core.ray import Ray, make_ray, normalize, vec3
from weekend_tracer.core.sampler import init_sample_state, normalize_seed
from weekend_tracer.materials.dielectric import scatter_dielectric_by_id
from weekend_tracer.materials.lambertian import scatter_lambertian_by_id
from weekend_tracer.materials.metal import scatter_metal_by_id
from weekend_tracer.scene.intersection import intersect_scene
from weekend_tracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Shading Constants
# =============================================================================

# Sky gradient end points
WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1280
MAX_IMAGE_HEIGHT = 1280

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Accumulated (summed) colour, indexed [row, column]
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Samples accumulated per pixel, indexed [row, column]
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-value results of the probe kernels
_probe_colour = ti.Vector.field(3, dtype=ti.f64, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.i32,
):
    """Dispatch to the scattering function of a material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing toward the ray).
        front_face: 1 if hit front face, 0 if back face.
        state: The current random state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    rng = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter, rng = scatter_lambertian_by_id(
            type_index, normal, rng
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, rng = scatter_metal_by_id(
            type_index, incident_direction, normal, rng
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter, rng = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, rng
        )

    return scattered_direction, attenuation, did_scatter, rng


# =============================================================================
# Colour Evaluation
# =============================================================================


@ti.func
def background_colour(direction: vec3) -> vec3:
    """Sky gradient: white at the horizon below, blue overhead."""
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * WHITE + a * SKY_BLUE


@ti.func
def ray_colour(ray: Ray, max_depth: ti.i32, state: ti.i32):
    """Estimate the colour seen along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of scene intersections along the path.
            0 yields black.
        state: The current random state.

    Returns:
        A tuple (colour, new_state) with colour in linear RGB.
    """
    colour = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    rng = state

    # Taichi does not support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), make_interval(T_MIN, T_MAX))

            if rec.hit == 0:
                colour = throughput * background_colour(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, rng = scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face, rng
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput = throughput * attenuation
                    origin = rec.point
                    direction = scattered_direction

    return colour, rng


@ti.func
def normal_colour(ray: Ray) -> vec3:
    """Visualize surface normals: 0.5 * (normal + 1) on a hit, sky on a miss.

    Deterministic, consumes no random state.
    """
    colour = background_colour(ray.direction)
    rec = intersect_scene(ray, make_interval(T_MIN, T_MAX))
    if rec.hit == 1:
        colour = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
    return colour


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    sample_index: ti.i32,
    seed: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Render one sample of one pixel.

    A pure function of its arguments and the (read-only) scene and camera:
    the random state is derived from (seed, pixel, sample).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        sample_index: Index of the sample within the pixel.
        seed: The render seed.
        max_depth: Maximum bounce depth.

    Returns:
        The sample's linear RGB colour.
    """
    state = init_sample_state(seed, pixel_j * width + pixel_i, sample_index)
    origin, direction, state = get_ray(pixel_i, pixel_j, state)
    colour, state = ray_colour(make_ray(origin, direction), max_depth, state)

    # Replace NaN/Inf from degenerate geometry with zero
    for c in ti.static(range(3)):
        if tm.isnan(colour[c]) or tm.isinf(colour[c]):
            colour[c] = 0.0

    return colour


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    samples: ti.i32,
    sample_offset: ti.i32,
    seed: ti.i32,
    max_depth: ti.i32,
):
    """Accumulate samples for rows [row_start, row_end).

    Pixels are processed in parallel; each pixel's samples are summed by
    the thread owning that pixel.
    """
    for j, i in ti.ndrange((row_start, row_end), width):
        total = vec3(0.0, 0.0, 0.0)
        for s in range(samples):
            total += render_sample_impl(i, j, width, sample_offset + s, seed, max_depth)
        _color_buffer[j, i] += total
        _sample_count[j, i] += samples


@ti.kernel
def _render_single_sample(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    sample_index: ti.i32,
    seed: ti.i32,
    max_depth: ti.i32,
):
    for _ in range(1):
        _probe_colour[None] = render_sample_impl(
            pixel_i, pixel_j, width, sample_index, seed, max_depth
        )


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    max_depth: ti.i32,
    state: ti.i32,
):
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        colour, final_state = ray_colour(ray, max_depth, state)
        _probe_colour[None] = colour


@ti.kernel
def _shade_normal_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
    for _ in range(1):
        _probe_colour[None] = normal_colour(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)))


# =============================================================================
# Public Rendering API
# =============================================================================


def _probe_result() -> tuple[float, float, float]:
    colour = _probe_colour[None]
    return (float(colour[0]), float(colour[1]), float(colour[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_colour for a single ray against the current scene.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), non-zero.
        max_depth: Maximum bounce depth (0 returns black).
        seed: Seed of the random state used along the path.

    Returns:
        Tuple of (R, G, B) linear colour values.
    """
    _trace_ray_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        max_depth,
        normalize_seed(seed),
    )
    return _probe_result()


def shade_normal(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Evaluate the normal visualization for a single ray."""
    _shade_normal_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2]
    )
    return _probe_result()


def render_sample(
    pixel_i: int,
    pixel_j: int,
    sample_index: int = 0,
    seed: int = 0,
    max_depth: int = 10,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    Does not touch the accumulation buffer.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, _ = get_image_dimensions()
    _render_single_sample(pixel_i, pixel_j, width, sample_index, normalize_seed(seed), max_depth)
    return _probe_result()


def render_rows(
    row_start: int,
    row_end: int,
    samples: int,
    seed: int = 0,
    max_depth: int = 10,
    sample_offset: int = 0,
) -> None:
    """Accumulate samples into rows [row_start, row_end) of the render target.

    Args:
        row_start: First row (0 = top).
        row_end: One past the last row.
        samples: Number of samples to add to each pixel.
        seed: The render seed.
        max_depth: Maximum bounce depth.
        sample_offset: Index of the first sample added, so that successive
            passes draw fresh random streams.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")
    if row_start == row_end or samples <= 0:
        return

    _render_rows(
        row_start, row_end, width, samples, sample_offset, normalize_seed(seed), max_depth
    )


def render_image(samples: int = 1, seed: int = 0, max_depth: int = 10) -> None:
    """Accumulate samples into every pixel of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _, height = get_image_dimensions()
    render_rows(0, height, samples, seed=seed, max_depth=max_depth)


def get_accumulated_image_numpy() -> npt.NDArray[np.float64]:
    """Get the summed (not averaged) colour buffer.

    Returns:
        Array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float64)


def get_sample_count_numpy() -> npt.NDArray[np.int32]:
    """Get the per-pixel sample counts, shape (height, width)."""
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return np.ascontiguousarray(_sample_count.to_numpy()[:height, :width])
