"""Infinite plane primitive with ray-plane intersection.

A plane is defined by any point on it and its unit normal. The intersection
parameter is

    t = n.(p - o) / n.d

Rays whose direction is (nearly) perpendicular to the normal never hit; every
other parameter is filtered by the half-open interval, which also rejects the
non-finite values a degenerate ray could produce.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.plane import Plane, hit_plane
    >>> # Floor at y = -1; use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.config import PLANE_EPSILON
from src.pathtracer.core.ray import Interval, Ray, interval_contains, ray_at
from src.pathtracer.materials.material import SurfaceMaterial

from .sphere import HitRecord

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: Unit normal of the plane (vec3). The scene normalizes it when
            the plane is added.
        material: The surface material.
    """

    point: vec3
    normal: vec3
    material: SurfaceMaterial


@ti.func
def hit_plane(plane: Plane, ray: Ray, interval: Interval) -> HitRecord:
    """Intersect a ray with a plane.

    Args:
        plane: The plane to test.
        ray: The ray (direction need not be normalized).
        interval: Half-open range of acceptable t values.

    Returns:
        A HitRecord carrying the plane's stored normal, or a miss record.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)

    denom = tm.dot(plane.normal, ray.direction)
    if ti.abs(denom) > PLANE_EPSILON:
        t = tm.dot(plane.normal, plane.point - ray.origin) / denom
        if interval_contains(interval, t) == 1:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=plane.normal,
        material=plane.material,
    )
