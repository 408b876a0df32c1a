"""Scene module for scene management and hit records.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Sphere storage and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
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
    clear_materials,
    get_material_type,
    get_material_type_index,
    load_scene,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    PRESETS,
    create_gradient_scene,
    create_materials_scene,
    create_preset_scene,
    create_spheres_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "clear_materials",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "load_scene",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets module
    "PRESETS",
    "create_spheres_scene",
    "create_materials_scene",
    "create_gradient_scene",
    "create_preset_scene",
]
