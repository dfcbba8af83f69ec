"""Scene registry tying spheres to their materials.

Every material gets an ID from one shared numbering, no matter which
family it belongs to. Two Taichi fields map that ID back to the family
(Lambertian, Metal, Dielectric) and to the slot inside that family's own
parameter arrays. The integrator reads them to choose a scatter routine.

One material ID may be shared by any number of spheres. Materials are
never freed individually; they go away when the scene is cleared.

Usage:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> matte = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere((0.0, 0.0, -1.0), 0.5, matte)
    0
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from weekend_tracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from weekend_tracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from weekend_tracer.materials.metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from weekend_tracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)


class MaterialType(IntEnum):
    """Material families known to the integrator.

    The integer value is what kernels see through get_material_type().
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Shared ceiling for every family combined
MAX_MATERIALS = 1024

# Kernel-visible lookup tables, indexed by material ID
# family of each material
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# slot in the family arrays; the third metal registered gets slot 2
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Clear the unified material ID table."""
    num_materials[None] = 0


def _register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign the next unified material ID to a type-local material."""
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Material table is full ({MAX_MATERIALS} entries)")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Family of a material, as the MaterialType integer.

    Args:
        material_id: Shared material ID.

    Returns:
        -1 when material_id has not been registered.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of a material inside its family's parameter arrays.

    Lambertian ID 7 with slot 2 reads lambertian_albedos[2], for instance.

    Returns:
        The slot, or -1 when material_id has not been registered.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence into a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Python-side record of one registered material.

    Attributes:
        material_id: Shared material ID.
        material_type: Family the material belongs to.
        type_index: Slot inside the family arrays.
        params: Parameters after validation and clamping.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Python-side record of one sphere.

    Attributes:
        sphere_index: Position in the sphere fields.
        center: World-space centre.
        radius: Signed radius; negative makes the normals point inward.
        material_id: Material the sphere is shaded with.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene, ready for JSON.

    Attributes:
        materials: One dict per material; list position is the material ID.
        spheres: One dict per sphere.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Builds the sphere scene and hands out material IDs.

    Python-side records mirror what is written to the Taichi fields, so a
    scene can be inspected or serialized without touching the device.
    There is a single global scene: constructing a manager, or calling
    clear(), wipes every sphere and material field.

    Attributes:
        materials: MaterialInfo records, indexed by material ID.
        spheres: SphereInfo records in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        >>> brass = scene.add_metal_material(albedo=(0.7, 0.6, 0.3), fuzz=0.1)
        >>> scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)
        0
        >>> scene.add_metal_sphere((1.0, 0.5, -1.0), 0.5, (0.9, 0.9, 0.9))
        (1, 2)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Drop every sphere and material, on both the Python and Taichi side."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # --- materials -----------------------------------------------------------

    def _track_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = _register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its ID.

        Raises ValueError when an albedo channel lies outside [0, 1] and
        RuntimeError when either the Lambertian or the shared table is full.
        """
        albedo = _as_triple(albedo, "albedo")
        type_index = add_lambertian_material(albedo)
        return self._track_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a reflective material and return its ID.

        Args:
            albedo: Tint applied to each reflection, channels in [0, 1].
            fuzz: Radius of the random offset added to the mirror direction.
                Values above 1 are stored as 1; 0 gives a perfect mirror.
        """
        albedo = _as_triple(albedo, "albedo")
        fuzz = clamp_fuzz(float(fuzz))
        type_index = add_metal_material(albedo, fuzz)
        return self._track_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a clear refractive material and return its ID.

        ``ior`` is the refractive index relative to the surrounding medium;
        1.5 approximates glass. Non-positive values raise ValueError.
        """
        ior = float(ior)
        type_index = add_dielectric_material(ior)
        return self._track_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of get_material_type(); None if unregistered."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    # --- spheres -------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere using an already registered material.

        Args:
            center: World-space centre (x, y, z).
            radius: Signed radius. Negative values keep the same surface but
                flip its outward normal, which is how hollow glass is built.
            material_id: ID returned by one of the add_*_material methods.

        Returns:
            Position of the new sphere in the sphere fields.

        Raises:
            ValueError: Unknown material_id, or a radius of exactly zero.
            RuntimeError: The sphere fields are already full.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Unknown material_id {material_id}")
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")

        center = _as_triple(center, "center")
        radius = float(radius)
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, radius, material_id))
        return sphere_index

    # Shorthands that register a material and place a sphere with it.
    # Each returns (sphere_index, material_id).

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> tuple[int, int]:
        return self.add_sphere(center, radius, material_id), material_id

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        return self.add_sphere_with_material(
            center, radius, self.add_lambertian_material(albedo)
        )

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        return self.add_sphere_with_material(
            center, radius, self.add_metal_material(albedo, fuzz)
        )

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        return self.add_sphere_with_material(
            center, radius, self.add_dielectric_material(ior)
        )

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # --- serialization -------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as plain lists and dicts."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            entry.update(
                {k: list(v) if isinstance(v, tuple) else v for k, v in info.params.items()}
            )
            materials.append(entry)

        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Materials are registered in list order before any sphere is placed,
        so sphere entries may refer to any material by position. Invalid
        entries raise ValueError; the scene is left partially loaded.
        """
        self.clear()

        for entry in config.materials:
            kind = str(entry.get("type", "")).lower()
            if kind == "lambertian":
                self.add_lambertian_material(entry.get("albedo", [0.5, 0.5, 0.5]))
            elif kind == "metal":
                self.add_metal_material(
                    entry.get("albedo", [0.8, 0.8, 0.8]), entry.get("fuzz", 0.0)
                )
            elif kind == "dielectric":
                self.add_dielectric_material(entry.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {kind!r}")

        for entry in config.spheres:
            self.add_sphere(
                entry.get("center", [0.0, 0.0, 0.0]),
                entry.get("radius", 1.0),
                entry.get("material_id", 0),
            )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form: ``{"materials": [...], "spheres": [...]}``."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        self.from_config(
            SceneConfig(
                materials=data.get("materials", []),
                spheres=data.get("spheres", []),
            )
        )

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
