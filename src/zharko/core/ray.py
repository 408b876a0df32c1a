"""Rays and the small vector toolkit the kernels share.

Everything here is a deterministic @ti.func with no side effects. Randomness
lives in zharko.core.sampler.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def five_ahead() -> ti.f32:
    ...     return ray_at(Ray(origin=vec3(0.0), direction=vec3(0, 0, -1)), 5.0).z
    >>> five_ahead()
    -5.0
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# normalize() maps anything with a smaller squared length to the zero vector
NORMALIZE_EPSILON = 1e-16

# near_zero() threshold, per component
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """Half-line origin + t * direction, t >= 0.

    direction may have any non-zero length; t is measured in units of it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """v scaled to unit length; the zero vector when v is (almost) zero."""
    unit = vec3(0.0)
    len_sq = tm.dot(v, v)
    if len_sq > NORMALIZE_EPSILON:
        unit = v / ti.sqrt(len_sq)
    return unit


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """a at t = 0, b at t = 1, straight line in between."""
    return (1.0 - t) * a + t * b


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror incident about a unit normal: d - 2 (d . n) n.

    The length of incident is preserved.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Bend a unit incident direction through a surface by Snell's law.

    normal is unit length and faces the incoming ray; eta is the index on the
    incoming side divided by the index on the far side. When no refracted
    ray exists (total internal reflection) the zero vector is returned.
    """
    cos_i = tm.min(-tm.dot(incident, normal), 1.0)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    bent = vec3(0.0)
    if sin2_t <= 1.0:
        bent = eta * incident + (eta * cos_i - ti.sqrt(1.0 - sin2_t)) * normal
    return bent


@ti.func
def schlick_reflectance(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Schlick's approximation of the Fresnel reflectance.

    cosine is cos(theta) between the incoming ray and the normal and ratio
    the relative refractive index. The result lies in [0, 1].
    """
    r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 if every component of v is within NEAR_ZERO_EPSILON of 0, else 0."""
    tiny = 0
    if ti.abs(v).max() < NEAR_ZERO_EPSILON:
        tiny = 1
    return tiny
