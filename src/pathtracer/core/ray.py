"""Ray data structure, intervals and vector utilities for the CPU path tracer.

This module provides the fundamental Ray and Interval dataclasses together with
the small set of vector helpers the shading kernel relies on. All operations are
designed to work within Taichi kernels, which the renderer runs on the CPU
backend.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4

# Largest finite float32, used as the open upper bound of primary rays
T_MAX = 3.4028234e38

# Rec. 709 luminance weights
LUMINANCE_WEIGHTS = (0.2126, 0.7152, 0.0722)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be unit length; code that depends on it normalizes first.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class Interval:
    """Half-open parametric interval [min_t, max_t) used for hit queries.

    Attributes:
        min_t: Inclusive lower bound.
        max_t: Exclusive upper bound.
    """

    min_t: ti.f32
    max_t: ti.f32


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def interval_contains(interval: Interval, t: ti.f32) -> ti.i32:
    """Check whether t lies in the half-open interval.

    NaN and infinities never satisfy both comparisons, which is what rejects
    the non-finite parameters produced by degenerate intersections.

    Returns:
        1 if min_t <= t < max_t, 0 otherwise.
    """
    inside = 0
    if t >= interval.min_t:
        if t < interval.max_t:
            inside = 1
    return inside


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def luminance(color: vec3) -> ti.f32:
    """Compute the Rec. 709 relative luminance of a linear RGB color."""
    return (
        LUMINANCE_WEIGHTS[0] * color.x
        + LUMINANCE_WEIGHTS[1] * color.y
        + LUMINANCE_WEIGHTS[2] * color.z
    )


@ti.func
def saturate(x: ti.f32) -> ti.f32:
    """Clamp a scalar to [0, 1]."""
    return tm.clamp(x, 0.0, 1.0)


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Replace NaN/Inf channels with zero and clamp the rest to [0, 1].

    Args:
        color: A linear RGB color produced by the shading kernel.

    Returns:
        A displayable color with every channel in [0, 1].
    """
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)

