"""Background radiance and display encoding for colors.

Colors are vec3 values in linear radiance. The sky gradient is the only light
source in the scene; gamma correction maps the averaged radiance of a pixel
to a display-ready value.
"""

import taichi as ti
import taichi.math as tm

from zharko.core.ray import lerp, normalize, vec3

# Sky gradient endpoints: straight down (white) to straight up (sky blue)
SKY_BOTTOM = vec3(1.0, 1.0, 1.0)
SKY_TOP = vec3(0.5, 0.7, 1.0)


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color seen along a ray that escapes the scene.

    Blends linearly from white (straight down) to sky blue (straight up)
    based on the y component of the normalized direction.

    Args:
        direction: The ray direction (need not be normalized).

    Returns:
        The background radiance.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return lerp(SKY_BOTTOM, SKY_TOP, a)


@ti.func
def gamma_correct(color: vec3) -> vec3:
    """Clamp a linear color to [0, 1] and apply gamma 2 (square root)."""
    return ti.sqrt(tm.clamp(color, 0.0, 1.0))
