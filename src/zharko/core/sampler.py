"""Explicit random number streams for Monte Carlo sampling.

Randomness is never ambient: every function that needs random numbers takes
a ``ti.u32`` state and returns the advanced state alongside its result, so a
caller that starts from the same state always gets the same numbers.

Each pixel sample gets its own stream from ``seed_state(seed, i, j, sample)``,
a hash of the render seed and the sample coordinates. Pixels can therefore be
traced in any order, on any number of threads, with identical results.

The generator is xorshift32 over a Wang-hash seeded state. Floats carry the
top 24 bits of the state, which maps exactly onto the f32 mantissa and keeps
every value in [0, 1).

Example:
    >>> @ti.kernel
    ... def sample() -> ti.f32:
    ...     state = seed_state(7, 0, 0, 0)
    ...     value, state = random_f32(state)
    ...     return value
"""

import taichi as ti

from zharko.core.ray import length_squared, normalize, vec3

# Substitute state when a hash lands on zero (xorshift's fixed point)
FALLBACK_STATE = 1013904223

# Upper bound on rejection sampling iterations
MAX_REJECTION_ATTEMPTS = 100

# 1 / 2^24
INV_2_POW_24 = 1.0 / 16777216.0


@ti.func
def hash_u32(key: ti.u32) -> ti.u32:
    """Wang's 32-bit integer hash.

    Args:
        key: The value to hash.

    Returns:
        A well-mixed 32-bit hash of key.
    """
    h = ti.cast(key, ti.u32)
    h = (h ^ ti.cast(61, ti.u32)) ^ (h >> ti.cast(16, ti.u32))
    h = h * ti.cast(9, ti.u32)
    h = h ^ (h >> ti.cast(4, ti.u32))
    h = h * ti.cast(668265261, ti.u32)
    h = h ^ (h >> ti.cast(15, ti.u32))
    return h


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    s = ti.cast(state, ti.u32)
    s = s ^ (s << ti.cast(13, ti.u32))
    s = s ^ (s >> ti.cast(17, ti.u32))
    s = s ^ (s << ti.cast(5, ti.u32))
    return s


@ti.func
def seed_state(seed: ti.u32, pixel_i: ti.i32, pixel_j: ti.i32, sample: ti.i32) -> ti.u32:
    """Derive an independent random stream for one pixel sample.

    Args:
        seed: The render seed.
        pixel_i: Pixel x-coordinate.
        pixel_j: Pixel y-coordinate.
        sample: Sample index within the pixel.

    Returns:
        A non-zero initial state.
    """
    h = hash_u32(ti.cast(seed, ti.u32))
    h = hash_u32(h ^ ti.cast(pixel_i, ti.u32))
    h = hash_u32(h ^ ti.cast(pixel_j, ti.u32))
    h = hash_u32(h ^ ti.cast(sample, ti.u32))
    if h == ti.cast(0, ti.u32):
        h = ti.cast(FALLBACK_STATE, ti.u32)
    return h


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple of (value, next_state).
    """
    s = next_state(state)
    value = ti.cast(s >> ti.cast(8, ti.u32), ti.f32) * INV_2_POW_24
    return value, s


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Draw a point uniformly distributed inside the unit sphere.

    Uses rejection sampling from the enclosing cube. After
    MAX_REJECTION_ATTEMPTS misses (probability ~1e-32) returns the origin.

    Args:
        state: The current stream state.

    Returns:
        A tuple of (point, next_state) with length(point) < 1.
    """
    s = ti.cast(state, ti.u32)
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, s = random_f32(s)
            y, s = random_f32(s)
            z, s = random_f32(s)
            candidate = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 2.0 * z - 1.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = 1
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a unit vector uniformly distributed on the sphere.

    Returns:
        A tuple of (direction, next_state).
    """
    p, s = random_in_unit_sphere(state)
    return normalize(p), s
