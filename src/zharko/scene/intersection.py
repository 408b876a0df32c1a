"""Sphere storage and closest-hit queries over the whole scene.

Spheres live in preallocated Taichi fields, one field per attribute, so the
render kernels read them without any Python involvement. Each sphere keeps
the unified material ID handed out by SceneManager; the same ID may be shared
by any number of spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
"""

import math

import taichi as ti
import taichi.math as tm

from zharko.errors import ConfigurationError
from zharko.geometry.sphere import Sphere, hit_sphere

vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Closest hit of a ray against the scene.

    Same fields as geometry.sphere.HitRecord plus material_id, which is -1
    for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Forget every sphere; slots are reused by later add_sphere calls."""
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere to the scene.

    The material ID is stored as given. SceneManager.add_sphere checks it
    against the registered materials; callers using this function directly
    are responsible for passing a valid one.

    Returns:
        The sphere's index.

    Raises:
        ConfigurationError: If center is not three finite numbers or radius
            is not a positive finite number.
        RuntimeError: If MAX_SPHERES spheres are already stored.
    """
    if len(center) != 3 or not all(math.isfinite(c) for c in center):
        raise ConfigurationError(f"Sphere center must be a finite 3D point, got {center}")
    if not (radius > 0.0 and math.isfinite(radius)):
        raise ConfigurationError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Scene is full ({MAX_SPHERES} spheres)")

    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Number of spheres currently in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0),
        normal=vec3(0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Closest intersection over all spheres in (t_min, t_max).

    Every sphere is tested with the upper bound lowered to the nearest hit
    so far, so the answer does not depend on insertion order.
    """
    result = _make_miss_record()
    nearest = t_max

    for i in range(num_spheres[None]):
        rec = hit_sphere(
            ray_origin,
            ray_direction,
            Sphere(center=sphere_centers[i], radius=sphere_radii[i]),
            t_min,
            nearest,
        )
        if rec.hit == 1:
            nearest = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                front_face=rec.front_face,
                material_id=sphere_material_ids[i],
            )

    return result
