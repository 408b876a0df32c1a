"""Clear refracting surfaces such as glass, water or diamond.

At each hit the ray either reflects or refracts, never both. With ratio the
index on the incoming side over the index on the far side, refraction is
impossible once ratio * sin(theta) > 1 (total internal reflection).
Otherwise the ray reflects with the Schlick probability

    R(theta) = r0 + (1 - r0) (1 - cos(theta))^5,  r0 = ((1 - ratio) / (1 + ratio))^2

and refracts by Snell's law the rest of the time. Nothing is absorbed, so
attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.materials.dielectric import add_dielectric_material
    >>> add_dielectric_material(1.5)
    0
"""

import taichi as ti
import taichi.math as tm

from zharko.core.ray import normalize, reflect, refract, schlick_reflectance
from zharko.core.sampler import random_f32
from zharko.errors import ConfigurationError

vec3 = tm.vec3


@ti.func
def refraction_ratio(refractive_index: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio n_incident / n_transmitted for a ray crossing the surface.

    Entering from outside (front_face=1) the ratio is 1/ior, leaving from
    inside it is ior.
    """
    ratio = 1.0 / refractive_index
    if front_face == 0:
        ratio = refractive_index
    return ratio


@ti.func
def will_reflect(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 when the ray is totally internally reflected, else 0."""
    ratio = refraction_ratio(refractive_index, front_face)
    cos_theta = tm.min(-tm.dot(normalize(incident_direction), normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Probability of reflection at the surface.

    Schlick's approximation, except at a matched interface (ratio exactly 1)
    where there is no boundary to reflect from and the reflectance is 0.
    """
    ratio = refraction_ratio(refractive_index, front_face)
    cos_theta = tm.min(-tm.dot(normalize(incident_direction), normal), 1.0)

    reflectance = 0.0
    if ratio != 1.0:
        reflectance = schlick_reflectance(cos_theta, ratio)
    return reflectance


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Reflect or refract at the surface.

    front_face is 1 for a ray arriving from outside the material and 0 for
    one travelling inside it; normal faces the ray either way.

    Returns:
        (unit direction, white, 1, state)
    """
    d = normalize(incident_direction)
    must_reflect = will_reflect(refractive_index, d, normal, front_face)
    reflect_probability = fresnel_reflectance(refractive_index, d, normal, front_face)

    # Drawn on every path so the stream advances the same way whichever branch runs
    u, s = random_f32(state)

    direction = refract(d, normal, refraction_ratio(refractive_index, front_face))
    if must_reflect == 1 or u < reflect_probability:
        direction = reflect(d, normal)

    return direction, vec3(1.0), 1, s


MAX_DIELECTRIC_MATERIALS = 256

dielectric_indices = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(refractive_index: float = 1.5) -> int:
    """Store a dielectric and return its slot.

    Any positive index is accepted. An index below 1 describes something
    thinner than its surroundings, for example a bubble of air (1 / 1.5)
    inside a glass sphere.

    Raises:
        ConfigurationError: If refractive_index is not positive.
        RuntimeError: If all MAX_DIELECTRIC_MATERIALS slots are taken.
    """
    if not refractive_index > 0.0:
        raise ConfigurationError(f"Refractive index = {refractive_index} must be positive")

    slot = int(num_dielectric_materials[None])
    if slot == MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(f"All {MAX_DIELECTRIC_MATERIALS} dielectric material slots are in use")

    dielectric_indices[slot] = refractive_index
    num_dielectric_materials[None] = slot + 1
    return slot


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(slot: ti.i32) -> ti.f32:
    return dielectric_indices[slot]
