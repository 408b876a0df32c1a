"""Reflective metal surfaces.

The incoming direction is normalized and mirrored about the normal,

    r = d - 2 (d . n) n

then pushed by fuzz times a random point of the unit ball. fuzz = 0 is a
perfect mirror; larger values blur the reflection. If the push leaves r
pointing into the surface (r . n <= 0) the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.materials.metal import add_metal_material
    >>> add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
    0
"""

import taichi as ti
import taichi.math as tm

from zharko.core.ray import normalize, reflect
from zharko.core.sampler import random_in_unit_sphere
from zharko.errors import ConfigurationError
from zharko.materials.lambertian import validate_albedo

vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Fuzzed mirror bounce.

    A random point is drawn even when fuzz is 0, so the stream advances by
    the same amount for every metal.

    Returns:
        (direction, albedo, did_scatter, state); direction is the zero vector
        when did_scatter is 0.
    """
    mirrored = reflect(normalize(incident_direction), normal)
    offset, s = random_in_unit_sphere(state)
    direction = mirrored + fuzz * offset

    did_scatter = 1
    if tm.dot(direction, normal) <= 0.0:
        direction = vec3(0.0)
        did_scatter = 0
    return direction, albedo, did_scatter, s


MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Store a metal and return its slot.

    Raises:
        ConfigurationError: If albedo fails validate_albedo or fuzz is
            outside [0, 1].
        RuntimeError: If all MAX_METAL_MATERIALS slots are taken.
    """
    validate_albedo(albedo)
    if not 0.0 <= fuzz <= 1.0:
        raise ConfigurationError(f"Metal fuzz = {fuzz} must lie in [0, 1] (0 is a perfect mirror)")

    slot = int(num_metal_materials[None])
    if slot == MAX_METAL_MATERIALS:
        raise RuntimeError(f"All {MAX_METAL_MATERIALS} metal material slots are in use")

    metal_albedos[slot] = albedo
    metal_fuzzes[slot] = fuzz
    num_metal_materials[None] = slot + 1
    return slot


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(slot: ti.i32) -> vec3:
    return metal_albedos[slot]


@ti.func
def get_metal_fuzz(slot: ti.i32) -> ti.f32:
    return metal_fuzzes[slot]
