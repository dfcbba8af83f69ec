"""Scene module for scene storage, material tracking and preset scenes.

Components:
    intersection: Sphere storage and closest-hit scene queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes and matching cameras

Scene data lives in Taichi fields (structure-of-arrays layout) and is read
only while rendering.
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    clear_material_tracking,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    PRESETS,
    camera_for_preset,
    create_material_showcase_scene,
    create_random_spheres_scene,
    create_two_sphere_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "clear_material_tracking",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "PRESETS",
    "camera_for_preset",
    "create_two_sphere_scene",
    "create_material_showcase_scene",
    "create_random_spheres_scene",
]
