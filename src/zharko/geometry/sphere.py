"""Spheres and the ray-sphere hit test.

A point p lies on the sphere when |p - center| = radius. Substituting the ray
p(t) = origin + t * direction gives a quadratic in t whose linear term is
even, so the half-b form is used:

    a * t^2 + 2 * h * t + c = 0
    a = |direction|^2,  h = direction . (origin - center),
    c = |origin - center|^2 - radius^2

Roots are computed through q = -(h + sign(h) * sqrt(h^2 - a*c)), giving
t = q / a and t = c / q. This keeps precision for large spheres seen from far
away (the ground sphere), where the textbook formula subtracts two nearly equal
numbers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.geometry.sphere import Sphere, hit_sphere
    >>> ground = Sphere(center=ti.math.vec3(0, -101, -1), radius=100)
    >>> # record = hit_sphere(origin, direction, ground, t_min, t_max) in a kernel
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Below this |q| the ray passes through the centre line and c / q is unusable
DEGENERATE_Q = 1e-10


@ti.dataclass
class Sphere:
    """Center and radius (radius > 0)."""

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of a hit test.

    All fields other than hit are meaningful only when hit == 1.

    Attributes:
        hit: 1 on intersection, 0 on a miss.
        t: Ray parameter of the intersection, in units of the direction length.
        point: Intersection point.
        normal: Unit normal facing the incoming ray.
        front_face: 1 when the ray arrives from outside the surface.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def _quadratic_roots(a: ti.f32, h: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Both roots of a*t^2 + 2*h*t + c, ordered near then far."""
    q = -(h + ti.select(h < 0.0, -1.0, 1.0) * sqrt_d)

    near = (-h - sqrt_d) / a
    far = (-h + sqrt_d) / a
    if ti.abs(q) >= DEGENERATE_Q:
        near = q / a
        far = c / q

    return tm.min(near, far), tm.max(near, far)


@ti.func
def _face_normal(direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the ray.

    Returns:
        Tuple of (front_face, normal).
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere over the open interval (t_min, t_max).

    The near root is preferred; when it falls outside the interval the far
    root is tried, which is how a ray starting inside the sphere finds the
    back wall.

    Args:
        ray_origin: Ray origin.
        ray_direction: Ray direction, any non-zero length.
        sphere: Sphere to test.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord; hit is 0 when the ray misses within the interval.
    """
    record = HitRecord(hit=0, t=0.0, point=vec3(0.0), normal=vec3(0.0), front_face=0)

    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    if a > 0.0 and discriminant >= 0.0:
        near, far = _quadratic_roots(a, h, c, ti.sqrt(discriminant))

        t = near
        if not (t > t_min and t < t_max):
            t = far

        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            front_face, normal = _face_normal(
                ray_direction, (point - sphere.center) / sphere.radius
            )
            record = HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)

    return record


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Build a Sphere inside a kernel."""
    return Sphere(center=center, radius=radius)
