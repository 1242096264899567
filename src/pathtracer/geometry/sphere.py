"""Sphere primitive and the shared hit record.

This module provides the Sphere dataclass, the HitRecord returned by every
Hittable query, and the ray-sphere intersection routine.

The intersection solves

    a*t^2 + 2*b*t + c = 0

with a = d.d, b = (o - center).d and c = (o - center).(o - center) - r^2, and
only ever considers the smaller root. If that root falls outside the queried
interval the ray is reported as a miss even when the larger root would be
valid; a ray starting inside a sphere therefore never hits it. Shadow rays
leaving a sphere's surface rely on this to skip their own sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Interval, Ray, interval_contains, ray_at
from src.pathtracer.materials.material import SurfaceMaterial

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the query found an intersection, 0 for "none". Every other
            field is only meaningful when hit == 1.
        t: Ray parameter of the intersection, inside the queried interval.
        point: World-space intersection point.
        normal: Unit surface normal at the point.
        material: By-value copy of the surface material.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material: SurfaceMaterial


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material: The surface material.
    """

    center: vec3
    radius: ti.f32
    material: SurfaceMaterial


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord meaning "no intersection"."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material=SurfaceMaterial(
            albedo=vec3(0.0, 0.0, 0.0),
            roughness=0.0,
            specular_chance=0.0,
            emission=0.0,
            emission_color=vec3(0.0, 0.0, 0.0),
        ),
    )


@ti.func
def hit_sphere(sphere: Sphere, ray: Ray, interval: Interval) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        sphere: The sphere to test.
        ray: The ray (direction need not be normalized).
        interval: Half-open range of acceptable t values.

    Returns:
        A HitRecord for the smaller root if it lies in the interval, otherwise
        a miss record.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    discriminant = b * b - a * c
    if discriminant >= 0.0 and a > 0.0:
        t = (-b - ti.sqrt(discriminant)) / a
        if interval_contains(interval, t) == 1:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)
            hit_normal = (hit_point - sphere.center) / sphere.radius

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        material=sphere.material,
    )
