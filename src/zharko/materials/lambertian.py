"""Diffuse surfaces.

A diffuse bounce leaves along normal + random_unit_vector(), which spreads
outgoing rays over the hemisphere with density proportional to cos(theta),
and tints them by the albedo. A diffuse surface never absorbs a ray outright;
darkness comes only from albedo below 1 compounding over bounces.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.materials.lambertian import add_lambertian_material
    >>> add_lambertian_material((0.5, 0.5, 0.5))
    0
"""

import taichi as ti
import taichi.math as tm

from zharko.core.ray import near_zero
from zharko.core.sampler import random_unit_vector
from zharko.errors import ConfigurationError

vec3 = tm.vec3


@ti.func
def diffuse_direction(normal: vec3, offset: vec3) -> vec3:
    """normal + offset, or normal itself when offset almost cancels it."""
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Cosine-distributed bounce about normal.

    Returns:
        (direction, albedo, 1, state); direction is not normalized.
    """
    offset, s = random_unit_vector(state)
    return diffuse_direction(normal, offset), albedo, 1, s


MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Raise ConfigurationError unless albedo is three values in [0, 1].

    Values above 1 would make a surface reflect more light than it receives.
    """
    if len(albedo) != 3:
        raise ConfigurationError(f"Albedo needs 3 channels, got {len(albedo)}: {albedo!r}")
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"Albedo {channel} = {value} must lie in [0, 1]")


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a diffuse material and return its slot.

    Raises:
        ConfigurationError: See validate_albedo.
        RuntimeError: If all MAX_LAMBERTIAN_MATERIALS slots are taken.
    """
    validate_albedo(albedo)

    slot = int(num_lambertian_materials[None])
    if slot == MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(f"All {MAX_LAMBERTIAN_MATERIALS} Lambertian material slots are in use")

    lambertian_albedos[slot] = albedo
    num_lambertian_materials[None] = slot + 1
    return slot


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(slot: ti.i32) -> vec3:
    return lambertian_albedos[slot]
