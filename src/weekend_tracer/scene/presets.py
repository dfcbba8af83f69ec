"""Ready-made scenes and matching cameras.

Each preset builder fills a SceneManager (clearing it first) and returns it.
``camera_for_preset`` returns the camera each scene is meant to be viewed
through, optionally overriding image width, sampling and depth.

Presets:
    two_spheres: A small diffuse sphere resting on a huge ground sphere.
    showcase: Diffuse, hollow glass and fuzzy gold spheres side by side.
    random_spheres: A field of small random spheres around three large ones.

Example:
    >>> from weekend_tracer.scene.manager import SceneManager
    >>> from weekend_tracer.scene.presets import PRESETS, camera_for_preset
    >>> scene = PRESETS["showcase"](SceneManager())
    >>> camera = camera_for_preset("showcase", image_width=200)
"""

from collections.abc import Callable

import numpy as np

from weekend_tracer.camera.thin_lens import ThinLensCamera
from weekend_tracer.scene.manager import SceneManager

# =============================================================================
# Preset Constants
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GLASS_IOR = 1.5

# Reference point kept clear of small spheres in the random scene
FEATURE_CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
FEATURE_CLEARANCE = 0.9

# Material choice thresholds for the small random spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15


def create_two_sphere_scene(manager: SceneManager) -> SceneManager:
    """A diffuse sphere at (0, 0, -1) on a ground sphere of radius 100."""
    manager.clear()
    manager.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, GROUND_ALBEDO)
    manager.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
    return manager


def create_material_showcase_scene(manager: SceneManager) -> SceneManager:
    """Three spheres on a yellowish ground, one per material.

    The left sphere is a hollow glass shell: an outer sphere of radius 0.5
    and an inner sphere of radius -0.4 share one glass material, and the
    negative radius flips the inner surface's normals.
    """
    manager.clear()

    ground = manager.add_lambertian_material((0.8, 0.8, 0.0))
    centre = manager.add_lambertian_material((0.1, 0.2, 0.5))
    glass = manager.add_dielectric_material(GLASS_IOR)
    gold = manager.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)

    manager.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    manager.add_sphere((0.0, 0.0, -1.0), 0.5, centre)
    manager.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    manager.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)
    manager.add_sphere((1.0, 0.0, -1.0), 0.5, gold)
    return manager


def create_random_spheres_scene(manager: SceneManager, seed: int = 0) -> SceneManager:
    """The cover scene: a grid of small random spheres and three large ones.

    Small spheres sit on a 22 x 22 grid with random offsets. Each is diffuse
    (80%), metal (15%) or glass (5%). Positions and materials are drawn from
    a NumPy generator seeded with ``seed``, so the layout is reproducible.
    """
    manager.clear()
    rng = np.random.default_rng(seed)

    manager.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, GROUND_ALBEDO)

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - FEATURE_CLEARANCE_POINT) <= FEATURE_CLEARANCE:
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                manager.add_lambertian_sphere(position, 0.2, tuple(albedo.tolist()))
            elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                manager.add_metal_sphere(position, 0.2, tuple(albedo.tolist()), fuzz)
            else:
                manager.add_dielectric_sphere(position, 0.2, GLASS_IOR)

    manager.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, GLASS_IOR)
    manager.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    manager.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)
    return manager


# =============================================================================
# Preset Registry
# =============================================================================

PRESETS: dict[str, Callable[[SceneManager], SceneManager]] = {
    "two_spheres": create_two_sphere_scene,
    "showcase": create_material_showcase_scene,
    "random_spheres": create_random_spheres_scene,
}

_PRESET_CAMERAS: dict[str, ThinLensCamera] = {
    "two_spheres": ThinLensCamera(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
    ),
    "showcase": ThinLensCamera(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        vfov=20.0,
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        defocus_angle=10.0,
        focus_dist=3.4,
    ),
    "random_spheres": ThinLensCamera(
        aspect_ratio=16.0 / 9.0,
        image_width=1200,
        samples_per_pixel=500,
        max_depth=50,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    ),
}


def camera_for_preset(
    name: str,
    *,
    image_width: int | None = None,
    samples_per_pixel: int | None = None,
    max_depth: int | None = None,
    aspect_ratio: float | None = None,
) -> ThinLensCamera:
    """Camera configured for a preset scene.

    Args:
        name: Preset name (a key of PRESETS).
        image_width: Override of the image width.
        samples_per_pixel: Override of the samples per pixel.
        max_depth: Override of the bounce depth.
        aspect_ratio: Override of the aspect ratio.

    Returns:
        A new ThinLensCamera.

    Raises:
        ValueError: If the preset name is unknown.
    """
    if name not in _PRESET_CAMERAS:
        raise ValueError(f"Unknown scene preset '{name}', expected one of {sorted(PRESETS)}")

    base = _PRESET_CAMERAS[name]
    return ThinLensCamera(
        aspect_ratio=base.aspect_ratio if aspect_ratio is None else aspect_ratio,
        image_width=base.image_width if image_width is None else image_width,
        samples_per_pixel=(
            base.samples_per_pixel if samples_per_pixel is None else samples_per_pixel
        ),
        max_depth=base.max_depth if max_depth is None else max_depth,
        vfov=base.vfov,
        lookfrom=base.lookfrom,
        lookat=base.lookat,
        vup=base.vup,
        defocus_angle=base.defocus_angle,
        focus_dist=base.focus_dist,
    )
