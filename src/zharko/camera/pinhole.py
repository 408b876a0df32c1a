"""Look-at pinhole camera.

A camera is given by where it sits (lookfrom), what it looks at (lookat), a
rough up direction (vup), a vertical field of view in degrees and the image
aspect ratio. From these setup_camera builds a right-handed frame

    w = normalize(lookfrom - lookat)    points back, away from the scene
    u = normalize(vup x w)              points right
    v = w x u                           points up

and an image rectangle one unit along -w whose height is 2 * tan(vfov / 2).
Rays start at lookfrom and pass through that rectangle. There is no lens, so
nothing is out of focus.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> setup_camera(PinholeCamera(lookfrom=(0, 0, 0), lookat=(0, 0, -1), vfov=90.0))
    >>> @ti.kernel
    ... def centre() -> ti.f32:
    ...     return get_ray(0.5, 0.5).direction.z
    >>> centre()
    -1.0
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import taichi as ti

from zharko.core.ray import Ray, make_ray
from zharko.core.sampler import random_f32
from zharko.errors import ConfigurationError

# Below this |cross(vup, w)| the up vector is treated as parallel to the view
PARALLEL_EPSILON = 1e-8


@dataclass
class PinholeCamera:
    """Look-at camera parameters; validated on construction.

    Attributes:
        lookfrom: Eye position.
        lookat: Point at the centre of the image; must differ from lookfrom.
        vup: Approximate up direction; must not be parallel to the view.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Image width over image height.

    Raises:
        ConfigurationError: If the parameters cannot describe a camera.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0

    def __post_init__(self) -> None:
        for name in ("lookfrom", "lookat", "vup"):
            value = getattr(self, name)
            if len(value) != 3 or not all(math.isfinite(c) for c in value):
                raise ConfigurationError(f"{name} must be a finite 3D vector, got {value}")
            setattr(self, name, tuple(float(c) for c in value))

        if not 0.0 < self.vfov < 180.0:
            raise ConfigurationError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if not (self.aspect_ratio > 0.0 and math.isfinite(self.aspect_ratio)):
            raise ConfigurationError(f"aspect_ratio = {self.aspect_ratio} must be positive")

        w = np.subtract(self.lookfrom, self.lookat)
        if np.linalg.norm(w) == 0.0:
            raise ConfigurationError("lookfrom and lookat must be different points")
        u = np.cross(self.vup, w / np.linalg.norm(w))
        if np.linalg.norm(u) < PARALLEL_EPSILON:
            raise ConfigurationError(
                f"vup = {self.vup} must not be parallel to the view direction"
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the camera parameters as a JSON-compatible dict."""
        data = asdict(self)
        for name in ("lookfrom", "lookat", "vup"):
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], aspect_ratio: float | None = None) -> "PinholeCamera":
        """Build a camera from a config dict.

        Args:
            data: Mapping with any of lookfrom, lookat, vup, vfov, aspect_ratio.
                Missing keys take the dataclass defaults.
            aspect_ratio: Overrides the aspect ratio in data if given.

        Raises:
            ConfigurationError: If the dict contains unknown keys or bad values.
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Camera must be an object, got {type(data).__name__}")
        known = {"lookfrom", "lookat", "vup", "vfov", "aspect_ratio"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown camera keys: {sorted(unknown)}")

        kwargs = dict(data)
        if aspect_ratio is not None:
            kwargs["aspect_ratio"] = aspect_ratio
        try:
            return cls(**kwargs)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid camera configuration: {exc}") from exc


# Derived camera state, one vec3 per slot, read by get_ray inside kernels
ORIGIN, AXIS_U, AXIS_V, AXIS_W, HORIZONTAL, VERTICAL, LOWER_LEFT = range(7)
_FRAME_NAMES = ("origin", "u", "v", "w", "horizontal", "vertical", "lower_left")

_frame = ti.Vector.field(3, dtype=ti.f32, shape=len(_FRAME_NAMES))


def setup_camera(camera: PinholeCamera) -> None:
    """Upload camera to the kernel-side frame.

    Derives the basis and the image-plane rectangle one unit in front of
    lookfrom. Call it again after changing the camera; kernels always see the
    last uploaded one.
    """
    half_height = math.tan(math.radians(camera.vfov) / 2.0)
    plane_height = 2.0 * half_height
    plane_width = camera.aspect_ratio * plane_height

    eye = np.asarray(camera.lookfrom, dtype=np.float64)
    back = eye - np.asarray(camera.lookat, dtype=np.float64)
    back /= np.linalg.norm(back)
    right = np.cross(np.asarray(camera.vup, dtype=np.float64), back)
    right /= np.linalg.norm(right)
    up = np.cross(back, right)

    horizontal = plane_width * right
    vertical = plane_height * up
    frame = {
        ORIGIN: eye,
        AXIS_U: right,
        AXIS_V: up,
        AXIS_W: back,
        HORIZONTAL: horizontal,
        VERTICAL: vertical,
        LOWER_LEFT: eye - 0.5 * horizontal - 0.5 * vertical - back,
    }
    for slot, vector in frame.items():
        _frame[slot] = vector.tolist()


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Ray from the eye through image-plane point (s, t).

    s runs 0 to 1 from the left edge to the right, t from the bottom edge to
    the top. The direction is left unnormalized.
    """
    eye = _frame[ORIGIN]
    target = _frame[LOWER_LEFT] + s * _frame[HORIZONTAL] + t * _frame[VERTICAL]
    return make_ray(eye, target - eye)


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32
):
    """Ray through a uniformly random point of pixel (pixel_i, pixel_j).

    pixel_i counts columns from the left, pixel_j rows from the bottom.

    Returns:
        (ray, state)
    """
    dx, state = random_f32(state)
    dy, state = random_f32(state)
    s = (ti.cast(pixel_i, ti.f32) + dx) / ti.cast(width, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + dy) / ti.cast(height, ti.f32)
    return get_ray(s, t), state


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Uploaded frame vectors by name (origin, u, v, w, horizontal, vertical, lower_left)."""
    frame = _frame.to_numpy()
    return {name: tuple(float(c) for c in frame[slot]) for slot, name in enumerate(_FRAME_NAMES)}
