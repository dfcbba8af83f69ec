"""Pytest configuration for weekend_tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.

Test kernels that call Taichi functions containing loops run their body
inside ``for _ in range(1):`` so those loops stay serial.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so that Taichi is initialized first
    from weekend_tracer.core.integrator import clear_render_target
    from weekend_tracer.materials.dielectric import clear_dielectric_materials
    from weekend_tracer.materials.lambertian import clear_lambertian_materials
    from weekend_tracer.materials.metal import clear_metal_materials
    from weekend_tracer.scene.intersection import clear_scene
    from weekend_tracer.scene.manager import clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
