"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    sampler: Explicit, seedable random streams and sphere sampling
    color: Sky background and gamma correction
    integrator: Iterative path tracing and the render target
    renderer: Row-by-row rendering with progress and cancellation

Randomness is threaded explicitly through every sampling call so that a
render is a pure function of scene, camera, settings and seed.
"""

from .color import gamma_correct, sky_color
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    lerp,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    hash_u32,
    next_state,
    random_f32,
    random_in_unit_sphere,
    random_unit_vector,
    seed_state,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from zharko.core.integrator or zharko.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "lerp",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "hash_u32",
    "next_state",
    "seed_state",
    "random_f32",
    "random_in_unit_sphere",
    "random_unit_vector",
    "sky_color",
    "gamma_correct",
]
