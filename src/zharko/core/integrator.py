"""Path tracing kernels and the image buffer they write.

Light comes only from the sky. A camera ray is followed from surface to
surface; every scatter multiplies a running throughput by the material's
attenuation, and when the path finally leaves the scene it returns
throughput * sky_color(direction). Absorption, or using up max_depth
interactions, ends the path in black.

Each pixel averages samples_per_pixel jittered rays. Sample k of pixel (i, j)
draws all of its randomness from seed_state(seed, i, j, k), so a render is a
pure function of the scene, the camera, the settings and the seed, no matter
how the rows are split into kernel launches or how Taichi schedules them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.camera.pinhole import setup_camera
    >>> from zharko.core.integrator import get_image_numpy, render_rows, setup_render_target
    >>> from zharko.scene.presets import create_spheres_scene
    >>> scene, camera = create_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_rows(0, 225, samples_per_pixel=20, max_depth=10, seed=0)
    >>> get_image_numpy().shape
    (225, 400, 3)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from zharko.camera.pinhole import get_ray_jittered
from zharko.core.color import gamma_correct, sky_color
from zharko.core.ray import Ray
from zharko.core.sampler import seed_state
from zharko.errors import ConfigurationError
from zharko.materials.dielectric import get_dielectric_index, scatter_dielectric
from zharko.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from zharko.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from zharko.scene.intersection import intersect_scene
from zharko.scene.manager import MaterialType, get_material_type, get_material_type_index

vec3 = tm.vec3

# Hits closer than T_MIN are ignored so a scattered ray cannot re-hit the
# surface it leaves from
T_MIN = 1e-3
T_MAX = 1e10

MAX_SEED = 2**32 - 1

# The buffer is allocated once at full size; smaller images use its corner
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Gamma-corrected colors indexed [i, j], j = 0 being the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
# (width, height) in use; (0, 0) until setup_render_target runs
_target_size = ti.Vector.field(2, dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Select the active image size and blank the buffer.

    Raises:
        ConfigurationError: If width is outside [1, MAX_IMAGE_WIDTH] or height
            outside [1, MAX_IMAGE_HEIGHT].
    """
    if not 1 <= width <= MAX_IMAGE_WIDTH or not 1 <= height <= MAX_IMAGE_HEIGHT:
        raise ConfigurationError(
            f"Cannot render {width}x{height}: each side must be from 1 up to "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )
    _target_size[None] = (width, height)
    clear_render_target()


def clear_render_target() -> None:
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """(width, height) of the active render target."""
    size = _target_size[None]
    return int(size[0]), int(size[1])


def _require_render_target() -> tuple[int, int]:
    width, height = get_image_dimensions()
    if width == 0 or height == 0:
        raise RuntimeError("No render target; call setup_render_target(width, height) first")
    return width, height


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Scatter off whichever material material_id refers to.

    normal faces the incoming ray; front_face tells the dielectric which
    side it is on. Unregistered IDs absorb.

    Returns:
        (direction, attenuation, did_scatter, state)
    """
    kind = get_material_type(material_id)
    slot = get_material_type_index(material_id)

    direction = vec3(0.0)
    attenuation = vec3(0.0)
    did_scatter = 0
    s = ti.cast(state, ti.u32)

    if kind == int(MaterialType.LAMBERTIAN):
        direction, attenuation, did_scatter, s = scatter_lambertian(
            get_lambertian_albedo(slot), normal, s
        )
    elif kind == int(MaterialType.METAL):
        direction, attenuation, did_scatter, s = scatter_metal(
            get_metal_albedo(slot), get_metal_fuzz(slot), incident_direction, normal, s
        )
    elif kind == int(MaterialType.DIELECTRIC):
        direction, attenuation, did_scatter, s = scatter_dielectric(
            get_dielectric_index(slot), incident_direction, normal, front_face, s
        )

    return direction, attenuation, did_scatter, s


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Radiance carried back along ray, following at most max_depth surface hits.

    Written as a loop with an in-flight flag instead of recursion; kernels
    cannot recurse or break out of this loop.

    Returns:
        (color, state)
    """
    origin = ray.origin
    direction = ray.direction
    s = ti.cast(state, ti.u32)

    color = vec3(0.0)
    throughput = vec3(1.0)
    in_flight = 1

    for _ in range(max_depth):
        if in_flight == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * sky_color(direction)
                in_flight = 0
            else:
                new_direction, attenuation, did_scatter, s = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face, s
                )
                if did_scatter == 1:
                    throughput = throughput * attenuation
                    origin = rec.point
                    direction = new_direction
                else:
                    in_flight = 0

    return color, s


@ti.func
def render_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    """Mean linear radiance of one pixel; non-finite channels come out as 0."""
    total = vec3(0.0)
    for sample in range(samples_per_pixel):
        state = seed_state(seed, pixel_i, pixel_j, sample)
        ray, state = get_ray_jittered(pixel_i, pixel_j, width, height, state)
        color, state = ray_color(ray, max_depth, state)
        total += color

    mean = total / ti.cast(samples_per_pixel, ti.f32)
    for c in ti.static(range(3)):
        if tm.isnan(mean[c]) or tm.isinf(mean[c]):
            mean[c] = 0.0
    return mean


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    for i, j in ti.ndrange((0, width), (row_start, row_end)):
        mean = render_pixel(i, j, width, height, samples_per_pixel, max_depth, seed)
        _color_buffer[i, j] = gamma_correct(mean)


_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32):
    # One-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        state = seed_state(seed, 0, 0, 0)
        color, state = ray_color(Ray(origin=origin, direction=direction), max_depth, state)
        _trace_result[None] = color


def render_rows(
    row_start: int,
    row_end: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int,
) -> None:
    """Render buffer rows row_start <= j < row_end (j = 0 is the bottom row).

    The range is clipped to the image. Other rows keep whatever they hold,
    so a frame may be rendered slice by slice.

    Raises:
        RuntimeError: If setup_render_target has not been called.
    """
    width, height = _require_render_target()
    row_start = max(0, row_start)
    row_end = min(height, row_end)
    if row_start < row_end:
        _render_rows(row_start, row_end, width, height, samples_per_pixel, max_depth, seed)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = 10,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Linear (not gamma-corrected) radiance seen along a single ray.

    Uses the current scene. Meant for tests and for probing a scene from
    Python.
    """
    _trace_single_ray(vec3(*origin), vec3(*direction), max_depth, seed)
    color = _trace_result[None]
    return float(color[0]), float(color[1]), float(color[2])


def get_image_numpy() -> np.ndarray:
    """Copy of the finished image.

    Returns:
        float32 array of shape (height, width, 3) with gamma-corrected values
        in [0, 1]; row 0 is the top of the image.

    Raises:
        RuntimeError: If setup_render_target has not been called.
    """
    width, height = _require_render_target()
    columns = _color_buffer.to_numpy()[:width, :height]
    # Buffer is [x, y] with y up; images are [row, column] with row 0 on top
    return np.ascontiguousarray(np.flipud(columns.transpose(1, 0, 2)), dtype=np.float32)
