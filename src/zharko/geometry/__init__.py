"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection routine:

Components:
    sphere: Sphere primitive with robust ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they run inside the
parallel render kernels. Every primitive follows the same contract:

    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)

returning a HitRecord whose normal faces the incoming ray. New shapes join the
scene by implementing this contract and a storage block in
zharko.scene.intersection.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
