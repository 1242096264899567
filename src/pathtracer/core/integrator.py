"""Single-hit shading kernel and the row-parallel frame kernel.

Every primary ray is traced to its first hit only. The hit surface contributes
its own emission plus direct light from one point light chosen by weighted
reservoir sampling (next event estimation):

    1. Draw M = min(light count, max candidates) lights uniformly with
       replacement. For each compute the unshadowed contribution
           f = light.sample() * albedo * clamp(n.l, 0, 1)
       and stream it into a reservoir with weight luminance(f) * light count.
    2. Keep the selected light y, set p_hat = luminance(f(y)) and finalize
       the reservoir weight W.
    3. Trace a shadow ray toward y over [shadow_epsilon, distance to light);
       if anything blocks it, W = 0.
    4. radiance = emission + f(y) * W

Rays that miss everything return the transparent black background; hits are
opaque. Final colors are sanitized so NaN or Inf never reach the frame buffer.

The frame kernel's outermost loop runs over tasks of `rows_per_task`
consecutive image rows, which Taichi spreads over its CPU thread pool. Each
pixel is written by explicit (row, col) index, so the output does not depend
on the order tasks finish in. Kernel completion is the frame barrier.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.config import RenderConfig
    >>> from src.pathtracer.core.integrator import render_frame
    >>> from src.pathtracer.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> camera.on_resize(64, 48)
    >>> pixels = render_frame(scene, camera, RenderConfig())
    >>> pixels.shape
    (48, 64, 4)
"""

import os

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.camera import Camera
from src.pathtracer.core.config import RenderConfig
from src.pathtracer.core.ray import T_MAX, Interval, Ray, luminance, sanitize_color
from src.pathtracer.core.reservoir import (
    NO_CANDIDATE,
    empty_reservoir,
    reservoir_finalize,
    reservoir_update,
)
from src.pathtracer.materials.material import emitted_radiance
from src.pathtracer.scene.scene import CHANNELS, Scene

# Type aliases for vectors
vec3 = tm.vec3
vec4 = tm.vec4

# =============================================================================
# Shading Constants
# =============================================================================

# Primary rays start at the camera origin
PRIMARY_T_MIN = 0.0

# Color returned for rays that hit nothing
BACKGROUND_COLOR = vec4(0.0, 0.0, 0.0, 0.0)

# Light closer than this to the shading point contributes nothing
MIN_LIGHT_DISTANCE = 1e-6


# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def light_contribution(scene: ti.template(), light: ti.i32, point: vec3, normal: vec3, albedo: vec3):
    """Unshadowed contribution of one light to a shading point.

    Args:
        scene: The scene holding the light.
        light: Light slot index.
        point: World-space shading point.
        normal: Unit surface normal at the point.
        albedo: Surface albedo.

    Returns:
        A tuple of (f, to_light, distance) where f is the RGB contribution,
        to_light the unit direction toward the light and distance the distance
        to it. A light sitting on the point yields f = 0.
    """
    f = vec3(0.0, 0.0, 0.0)
    to_light = vec3(0.0, 0.0, 0.0)

    offset = scene.light_position(light) - point
    distance = tm.length(offset)
    if distance > MIN_LIGHT_DISTANCE:
        to_light = offset / distance
        cos_theta = tm.clamp(tm.dot(normal, to_light), 0.0, 1.0)
        f = scene.light_sample(light) * albedo * cos_theta

    return f, to_light, distance


@ti.func
def sample_direct_light(
    scene: ti.template(),
    point: vec3,
    normal: vec3,
    albedo: vec3,
    max_candidates: ti.i32,
    shadow_epsilon: ti.f32,
    pdf_epsilon: ti.f32,
) -> vec3:
    """Estimate direct light at a point using reservoir-selected lights.

    Returns:
        f(y) * W for the selected light y, or zero if there are no lights,
        every candidate contributes nothing, or the light is occluded.
    """
    result = vec3(0.0, 0.0, 0.0)
    n_lights = scene.lights_available()

    if n_lights > 0:
        m = ti.min(n_lights, max_candidates)
        source_pdf = 1.0 / ti.cast(n_lights, ti.f32)

        r = empty_reservoir()
        for k in range(m):
            candidate = ti.min(ti.cast(ti.random(ti.f32) * n_lights, ti.i32), n_lights - 1)
            f, unused_dir, unused_dist = light_contribution(scene, candidate, point, normal, albedo)
            r = reservoir_update(r, candidate, luminance(f) / source_pdf)

        if r.y != NO_CANDIDATE:
            f_y, to_light, distance = light_contribution(scene, r.y, point, normal, albedo)
            r = reservoir_finalize(r, luminance(f_y), pdf_epsilon)

            shadow_ray = Ray(origin=point, direction=to_light)
            if scene.occluded(shadow_ray, Interval(min_t=shadow_epsilon, max_t=distance)) == 1:
                r.w = 0.0

            result = f_y * r.w

    return result


# =============================================================================
# Per-pixel Shading
# =============================================================================


@ti.func
def per_pixel(
    scene: ti.template(),
    ray: Ray,
    max_candidates: ti.i32,
    shadow_epsilon: ti.f32,
    pdf_epsilon: ti.f32,
) -> vec4:
    """Shade one primary ray.

    Args:
        scene: The scene to trace against.
        ray: The primary ray.
        max_candidates: Upper bound on reservoir candidates.
        shadow_epsilon: Start offset of the shadow ray.
        pdf_epsilon: Floor used when finalizing the reservoir.

    Returns:
        RGBA color with every channel in [0, 1]; alpha is 1 for hits and
        the background is (0, 0, 0, 0).
    """
    color = BACKGROUND_COLOR

    rec = scene.hit(ray, Interval(min_t=PRIMARY_T_MIN, max_t=T_MAX))
    if rec.hit == 1:
        radiance = emitted_radiance(rec.material)
        radiance += sample_direct_light(
            scene,
            rec.point,
            rec.normal,
            rec.material.albedo,
            max_candidates,
            shadow_epsilon,
            pdf_epsilon,
        )
        radiance = sanitize_color(radiance)
        color = vec4(radiance.x, radiance.y, radiance.z, 1.0)

    return color


@ti.func
def _to_byte(value: ti.f32) -> ti.u8:
    """Map a [0, 1] channel to 0..255 by truncation."""
    return ti.cast(ti.cast(value * 255.0, ti.i32), ti.u8)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    scene: ti.template(),
    origin: vec3,
    directions: ti.types.ndarray(dtype=ti.f32, ndim=3),
    out: ti.types.ndarray(dtype=ti.u8, ndim=3),
    max_candidates: ti.i32,
    shadow_epsilon: ti.f32,
    pdf_epsilon: ti.f32,
    rows_per_task: ti.i32,
    num_threads: ti.template(),
):
    """Shade every pixel, parallel over row ranges.

    Args:
        scene: The scene to trace against.
        origin: Camera position shared by all primary rays.
        directions: (height, width, 3) primary ray directions, top row first.
        out: (height, width, 4) RGBA8 output, top row first.
        max_candidates: Upper bound on reservoir candidates.
        shadow_epsilon: Start offset of shadow rays.
        pdf_epsilon: Floor used when finalizing reservoirs.
        rows_per_task: Consecutive rows shaded by one task; any positive value.
        num_threads: Worker threads for the task loop (compile-time).
    """
    height = directions.shape[0]
    width = directions.shape[1]
    num_tasks = (height + rows_per_task - 1) // rows_per_task

    ti.loop_config(parallelize=num_threads)
    for task in range(num_tasks):
        # The last task may cover fewer rows
        row_end = ti.min((task + 1) * rows_per_task, height)
        for row in range(task * rows_per_task, row_end):
            for col in range(width):
                direction = vec3(directions[row, col, 0], directions[row, col, 1], directions[row, col, 2])
                color = per_pixel(
                    scene,
                    Ray(origin=origin, direction=direction),
                    max_candidates,
                    shadow_epsilon,
                    pdf_epsilon,
                )
                for c in ti.static(range(4)):
                    out[row, col, c] = _to_byte(color[c])


@ti.kernel
def _shade_single_ray(
    scene: ti.template(),
    origin: vec3,
    direction: vec3,
    max_candidates: ti.i32,
    shadow_epsilon: ti.f32,
    pdf_epsilon: ti.f32,
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Shade a single ray into out[0:4]. Used for testing and debugging."""
    # Single-iteration outer loop keeps the shape and candidate loops serial
    for _ in range(1):
        color = per_pixel(
            scene,
            Ray(origin=origin, direction=direction),
            max_candidates,
            shadow_epsilon,
            pdf_epsilon,
        )
        for c in ti.static(range(4)):
            out[c] = color[c]


# =============================================================================
# Host Entry Points
# =============================================================================


def _resolve_threads(config: RenderConfig) -> int:
    return config.num_threads if config.num_threads > 0 else (os.cpu_count() or 1)


def shade_ray(
    scene: Scene,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    config: RenderConfig | None = None,
) -> tuple[float, float, float, float]:
    """Shade one ray outside of a full frame.

    Args:
        scene: The scene to trace against.
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        config: Render configuration. If None, uses RenderConfig().

    Returns:
        The sanitized RGBA color as floats in [0, 1].
    """
    if config is None:
        config = RenderConfig()
    color = np.zeros(CHANNELS, dtype=np.float32)
    _shade_single_ray(
        scene,
        vec3(*origin),
        vec3(*direction),
        config.max_light_candidates,
        config.shadow_epsilon,
        config.pdf_epsilon,
        color,
    )
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


def render_frame(scene: Scene, camera: Camera, config: RenderConfig) -> npt.NDArray[np.uint8]:
    """Render one frame without touching accumulation state.

    Args:
        scene: The scene to render.
        camera: The camera; its current size is the frame size.
        config: Render configuration.

    Returns:
        A (height, width, 4) uint8 RGBA array, top row first.
    """
    directions = camera.direction_grid()
    out = np.zeros((camera.height, camera.width, CHANNELS), dtype=np.uint8)
    position = camera.position

    _render_rows(
        scene,
        vec3(float(position[0]), float(position[1]), float(position[2])),
        directions,
        out,
        config.max_light_candidates,
        config.shadow_epsilon,
        config.pdf_epsilon,
        config.rows_per_task,
        _resolve_threads(config),
    )
    return out
