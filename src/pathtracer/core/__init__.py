"""Core rendering module.

Components:
    ray: Ray and Interval structures plus vector utilities
    config: Render configuration, per-frame flags and numerical constants
    reservoir: Weighted reservoir sampling for light selection
    integrator: Single-hit shading kernel and the row-parallel frame kernel
    progressive: Frame scheduling and running-mean accumulation

All per-pixel work runs in Taichi kernels on the CPU backend.
"""

from .config import (
    DEFAULT_MAX_LIGHT_CANDIDATES,
    PDF_EPSILON,
    PLANE_EPSILON,
    SHADOW_EPSILON,
    FrameState,
    RenderConfig,
)
from .ray import Interval, Ray, luminance, make_ray, ray_at, sanitize_color, vec3
from .reservoir import NO_CANDIDATE, Reservoir, empty_reservoir, reservoir_finalize, reservoir_update

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.progressive.

__all__ = [
    "Ray",
    "Interval",
    "ray_at",
    "make_ray",
    "luminance",
    "sanitize_color",
    "vec3",
    "RenderConfig",
    "FrameState",
    "SHADOW_EPSILON",
    "PDF_EPSILON",
    "PLANE_EPSILON",
    "DEFAULT_MAX_LIGHT_CANDIDATES",
    "Reservoir",
    "NO_CANDIDATE",
    "empty_reservoir",
    "reservoir_update",
    "reservoir_finalize",
]
