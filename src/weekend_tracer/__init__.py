"""Taichi-based recursive ray tracer for scenes of spheres.

This package renders spheres with diffuse, metal and glass materials using
Monte Carlo ray tracing, with support for:
- Anti-aliasing by sub-pixel jitter
- Depth of field through a thin-lens (defocus disk) camera
- Deterministic, seedable per-sample random streams
- Parallel evaluation of pixels on the Taichi CPU or GPU backends

Subpackages:
    core: Rays, random sampling, intervals, the colour integrator and renderer
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, material registry and preset scenes
    camera: Thin-lens camera with ray generation
    preview: Output encoding (PPM/PNG) and matplotlib preview
"""

__version__ = "0.1.0"
