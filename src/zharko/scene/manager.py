"""Scene building: materials, spheres and their wiring.

Every material, whatever its kind, gets an ID from one shared counter. The
integrator only ever sees that ID on a hit, so two small lookup tables in
Taichi fields translate it back into a kind (MaterialType) and a slot in the
per-kind parameter arrays:

    material_id 0 -> (LAMBERTIAN, 0)
    material_id 1 -> (METAL, 0)
    material_id 2 -> (LAMBERTIAN, 1)

SceneManager owns those tables together with the sphere store, and keeps a
Python-side mirror of both so a scene can be written back out as a dict.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> matte = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=matte)
    0
"""

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import taichi as ti

from zharko.errors import ConfigurationError
from zharko.materials import dielectric, lambertian, metal
from zharko.scene.intersection import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Material kinds, as stored in the material_types field."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# One ID per registered material, shared by all kinds
MAX_MATERIALS = (
    lambertian.MAX_LAMBERTIAN_MATERIALS + metal.MAX_METAL_MATERIALS + dielectric.MAX_DIELECTRIC_MATERIALS
)

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Empty the ID tables and every per-kind material registry."""
    lambertian.clear_lambertian_materials()
    metal.clear_metal_materials()
    dielectric.clear_dielectric_materials()
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value of a material ID, or -1 if it was never registered."""
    kind = -1
    if material_id >= 0 and material_id < num_materials[None]:
        kind = material_types[material_id]
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of a material ID in its kind's parameter arrays, or -1."""
    slot = -1
    if material_id >= 0 and material_id < num_materials[None]:
        slot = material_type_indices[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Python-side record of one registered material.

    Attributes:
        material_id: Shared ID, as stored on spheres.
        material_type: Kind of the material.
        type_index: Slot in the kind's parameter arrays.
        params: Constructor arguments, kept for serialization.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Python-side record of one sphere."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene: material entries, then sphere entries.

    Spheres name their material by position in the materials list.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(value: Any, name: str) -> tuple[float, float, float]:
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a list of 3 numbers, got {value!r}") from exc
    return (x, y, z)


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


class SceneManager:
    """Builds the scene the render kernels read.

    There is a single scene per Taichi runtime: constructing a SceneManager
    empties the sphere store and every material registry.

    Attributes:
        materials: MaterialInfo per registered material, indexed by ID.
        spheres: SphereInfo per sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> matte = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> for x, mat in ((0, matte), (1, gold), (-1, glass)):
        ...     scene.add_sphere((x, 0, -1), 0.5, mat)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove all spheres and materials."""
        clear_scene()
        clear_materials()
        self.materials = []
        self.spheres = []

    # -- materials -----------------------------------------------------------

    def _register(self, kind: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = int(num_materials[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Cannot register more than {MAX_MATERIALS} materials")

        material_types[material_id] = int(kind)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(MaterialInfo(material_id, kind, type_index, params))
        logger.debug("Material %d is %s #%d %s", material_id, kind.name, type_index, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material.

        Args:
            albedo: Reflectance per RGB channel, each in [0, 1].

        Returns:
            The new material ID.

        Raises:
            ConfigurationError: If albedo is not three values in [0, 1].
            RuntimeError: If a material registry is full.
        """
        slot = lambertian.add_lambertian_material(albedo)
        return self._register(MaterialType.LAMBERTIAN, slot, {"albedo": tuple(albedo)})

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Register a reflective material; fuzz 0 is a perfect mirror.

        Raises:
            ConfigurationError: If albedo or fuzz lies outside [0, 1].
            RuntimeError: If a material registry is full.
        """
        slot = metal.add_metal_material(albedo, fuzz)
        return self._register(MaterialType.METAL, slot, {"albedo": tuple(albedo), "fuzz": fuzz})

    def add_dielectric_material(self, refractive_index: float = 1.5) -> int:
        """Register a clear refracting material (1.5 is glass, 1.33 water).

        Raises:
            ConfigurationError: If refractive_index is not positive.
            RuntimeError: If a material registry is full.
        """
        slot = dielectric.add_dielectric_material(refractive_index)
        return self._register(
            MaterialType.DIELECTRIC, slot, {"refractive_index": refractive_index}
        )

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """MaterialInfo for an ID, or None for an unknown ID."""
        if material_id < 0 or material_id >= len(self.materials):
            return None
        return self.materials[material_id]

    # -- spheres -------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere made of an already registered material.

        Returns:
            The sphere's index.

        Raises:
            ConfigurationError: If material_id is not a registered ID, or the
                center or radius is invalid.
            RuntimeError: If the sphere store is full.
        """
        if not isinstance(material_id, int) or self.get_material_info(material_id) is None:
            raise ConfigurationError(
                f"material_id {material_id!r} does not name one of the "
                f"{self.get_material_count()} registered materials"
            )

        index = add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(index, tuple(center), radius, material_id))
        return index

    def add_lambertian_sphere(self, center, radius, albedo) -> tuple[int, int]:
        """Register a diffuse material and place one sphere made of it.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(self, center, radius, albedo, fuzz: float = 0.0) -> tuple[int, int]:
        """Metal counterpart of add_lambertian_sphere."""
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(self, center, radius, refractive_index: float = 1.5) -> tuple[int, int]:
        """Dielectric counterpart of add_lambertian_sphere."""
        material_id = self.add_dielectric_material(refractive_index)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -- configuration -------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as plain data (tuples become lists)."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            entry.update(
                (key, list(value) if isinstance(value, tuple) else value)
                for key, value in info.params.items()
            )
            materials.append(entry)

        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def _add_material_entry(self, entry: Any) -> None:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Material entry must be an object, got {entry!r}")

        kind = str(entry.get("type", "")).lower()
        if kind == "lambertian":
            self.add_lambertian_material(_as_triple(entry.get("albedo", [0.5, 0.5, 0.5]), "albedo"))
        elif kind == "metal":
            self.add_metal_material(
                _as_triple(entry.get("albedo", [0.8, 0.8, 0.8]), "albedo"),
                _as_float(entry.get("fuzz", 0.0), "fuzz"),
            )
        elif kind == "dielectric":
            self.add_dielectric_material(
                _as_float(entry.get("refractive_index", 1.5), "refractive_index")
            )
        else:
            raise ConfigurationError(
                f"Unknown material type {kind!r}; expected lambertian, metal or dielectric"
            )

    def _add_sphere_entry(self, entry: Any) -> None:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Sphere entry must be an object, got {entry!r}")

        self.add_sphere(
            _as_triple(entry.get("center", [0, 0, 0]), "center"),
            _as_float(entry.get("radius", 1.0), "radius"),
            entry.get("material_id", 0),
        )

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by config.

        Raises:
            ConfigurationError: On any malformed or out-of-range entry. The
                current scene is kept if the top-level lists are malformed.
        """
        for key in ("materials", "spheres"):
            entries = getattr(config, key)
            if not isinstance(entries, list):
                raise ConfigurationError(
                    f"Scene '{key}' must be a list, got {type(entries).__name__}"
                )

        self.clear()
        for entry in config.materials:
            self._add_material_entry(entry)
        for entry in config.spheres:
            self._add_sphere_entry(entry)

        logger.info(
            "Scene loaded: %d materials, %d spheres", len(self.materials), len(self.spheres)
        )

    def to_dict(self) -> dict[str, Any]:
        """Scene as a JSON-ready dict with 'materials' and 'spheres' keys."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load the 'materials' and 'spheres' keys of data; others are ignored."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Scene must be an object, got {type(data).__name__}")
        self.from_config(SceneConfig(data.get("materials", []), data.get("spheres", [])))

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS


def load_scene(path: str | Path) -> dict[str, Any]:
    """Read a JSON scene file.

    The file holds an object with 'materials', 'spheres' and optionally
    'camera' keys; see examples/scenes/ for a sample.

    Raises:
        ConfigurationError: If the file cannot be read, is not JSON, or its
            top level is not an object.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read scene file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"Scene file {path} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Scene file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Scene file {path} must contain a JSON object")
    return data
