"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) following the
Hittable contract:

    record = hit_shape(shape, ray, interval)

where interval is the half-open [min_t, max_t) range and record.hit == 0 means
"none". Shape kinds form a closed set dispatched by ShapeKind in the scene.
"""

from enum import IntEnum

from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, hit_sphere, miss_record


class ShapeKind(IntEnum):
    """Tag of the shape variant stored in scene shape slots."""

    SPHERE = 0
    PLANE = 1


__all__ = [
    "ShapeKind",
    "HitRecord",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "Plane",
    "hit_plane",
]
