"""Scene container: shapes, lights and accumulation state.

The Scene stores its primitives in Taichi fields using a Structure-of-Arrays
layout, one slot per shape with the shape's own material copy, and one slot per
light. Shapes form a closed variant set tagged by ShapeKind; kernels dispatch
on the tag rather than through dynamic dispatch.

Scene-level intersection folds over the ordered shape list, narrowing the
interval's upper bound to the closest t found so far, so the result is the
global minimum-t hit. There is no spatial index; each query is O(n).

The scene also owns the progressive accumulation state (running-mean buffer
and frame index). Any scene mutation invalidates it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials import Material
    >>> from src.pathtracer.scene.scene import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0.0, 0.0, 0.0), 0.5, Material(albedo=(1.0, 0.0, 1.0)))
    0
    >>> scene.add_point_light((2.0, 2.0, 2.0), strength=1.0)
    0
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Interval, Ray
from src.pathtracer.geometry import (
    HitRecord,
    Plane,
    ShapeKind,
    Sphere,
    hit_plane,
    hit_sphere,
    miss_record,
)
from src.pathtracer.materials.light import LightKind, PointLight, point_light_sample
from src.pathtracer.materials.material import Material, SurfaceMaterial

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Default slot capacities
MAX_SHAPES = 256
MAX_LIGHTS = 64

# frame_index value meaning "accumulation must restart"
INVALID_FRAME_INDEX = -1

# Channels per pixel in the accumulation buffer (RGBA)
CHANNELS = 4


@dataclass
class SphereInfo:
    """Host-side record of a sphere in the scene.

    Attributes:
        index: Slot index of the shape.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material assigned to the sphere.
    """

    index: int
    center: tuple[float, float, float]
    radius: float
    material: Material

    kind = ShapeKind.SPHERE


@dataclass
class PlaneInfo:
    """Host-side record of a plane in the scene.

    Attributes:
        index: Slot index of the shape.
        point: A point on the plane.
        normal: The unit normal of the plane.
        material: The material assigned to the plane.
    """

    index: int
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material: Material

    kind = ShapeKind.PLANE


ShapeInfo = SphereInfo | PlaneInfo


def _as_vec3(name: str, value: tuple[float, float, float]) -> tuple[float, float, float]:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"{name} must be finite, got {value}")
    return result


@ti.data_oriented
class Scene:
    """Ordered shape list, light list and progressive accumulation state.

    Attributes:
        shapes: Host-side records of all shapes, in slot order.
        lights: Host-side records of all lights, in slot order.
        accumulation: Running-mean buffer, float32, length width*height*4.
        frame_index: Number of frames merged into the running mean, or
            INVALID_FRAME_INDEX when the next frame must restart it.
        accumulate: Whether frames are averaged into the running mean.
        camera_key: Camera.state_key() of the last rendered frame, or None
            before the first frame.
    """

    def __init__(self, max_shapes: int = MAX_SHAPES, max_lights: int = MAX_LIGHTS) -> None:
        """Allocate shape and light storage.

        Args:
            max_shapes: Maximum number of shapes.
            max_lights: Maximum number of lights.

        Raises:
            ValueError: If a capacity is not positive.
        """
        if max_shapes < 1 or max_lights < 1:
            raise ValueError(
                f"Capacities must be positive, got max_shapes={max_shapes}, "
                f"max_lights={max_lights}"
            )
        self.max_shapes = max_shapes
        self.max_lights = max_lights

        # Shape storage: Structure of Arrays layout
        self.shape_kinds = ti.field(dtype=ti.i32, shape=max_shapes)
        self.shape_positions = ti.Vector.field(3, dtype=ti.f32, shape=max_shapes)
        self.shape_radii = ti.field(dtype=ti.f32, shape=max_shapes)
        self.shape_normals = ti.Vector.field(3, dtype=ti.f32, shape=max_shapes)
        self.num_shapes = ti.field(dtype=ti.i32, shape=())

        # Per-shape material copies
        self.material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=max_shapes)
        self.material_roughness = ti.field(dtype=ti.f32, shape=max_shapes)
        self.material_specular_chances = ti.field(dtype=ti.f32, shape=max_shapes)
        self.material_emissions = ti.field(dtype=ti.f32, shape=max_shapes)
        self.material_emission_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_shapes)

        # Light storage
        self.light_kinds = ti.field(dtype=ti.i32, shape=max_lights)
        self.light_positions = ti.Vector.field(3, dtype=ti.f32, shape=max_lights)
        self.light_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_lights)
        self.light_strengths = ti.field(dtype=ti.f32, shape=max_lights)
        self.num_lights = ti.field(dtype=ti.i32, shape=())

        self.shapes: list[ShapeInfo] = []
        self.lights: list[PointLight] = []

        self.width = 0
        self.height = 0
        self.accumulation: npt.NDArray[np.float32] = np.zeros(0, dtype=np.float32)
        self.frame_index = INVALID_FRAME_INDEX
        self.accumulate = True
        self.camera_key: tuple | None = None

        self.num_shapes[None] = 0
        self.num_lights[None] = 0

    # =========================================================================
    # Shape and Light Management
    # =========================================================================

    def _next_shape_slot(self) -> int:
        idx = len(self.shapes)
        if idx >= self.max_shapes:
            raise RuntimeError(f"Maximum number of shapes ({self.max_shapes}) exceeded")
        return idx

    def _write_material(self, idx: int, material: Material) -> None:
        self.material_albedos[idx] = material.albedo
        self.material_roughness[idx] = material.roughness
        self.material_specular_chances[idx] = material.specular_chance
        self.material_emissions[idx] = material.emission
        self.material_emission_colors[idx] = material.emission_color

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere to the end of the shape list.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material: The sphere's material.

        Returns:
            The slot index of the added sphere.

        Raises:
            ValueError: If the center is malformed or the radius not positive.
            RuntimeError: If the maximum number of shapes is exceeded.
        """
        center = _as_vec3("center", center)
        if not radius > 0.0 or not math.isfinite(radius):
            raise ValueError(f"radius must be positive and finite, got {radius}")
        idx = self._next_shape_slot()

        self.shape_kinds[idx] = int(ShapeKind.SPHERE)
        self.shape_positions[idx] = center
        self.shape_radii[idx] = radius
        self.shape_normals[idx] = (0.0, 0.0, 0.0)
        self._write_material(idx, material)
        self.num_shapes[None] = idx + 1

        self.shapes.append(SphereInfo(index=idx, center=center, radius=radius, material=material))
        self.invalidate()
        return idx

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        material: Material,
    ) -> int:
        """Add an infinite plane to the end of the shape list.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal as (x, y, z); normalized here.
            material: The plane's material.

        Returns:
            The slot index of the added plane.

        Raises:
            ValueError: If the normal has zero length.
            RuntimeError: If the maximum number of shapes is exceeded.
        """
        point = _as_vec3("point", point)
        nx, ny, nz = _as_vec3("normal", normal)
        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        if length < 1e-8:
            raise ValueError(f"normal must be non-zero, got {normal}")
        unit_normal = (nx / length, ny / length, nz / length)
        idx = self._next_shape_slot()

        self.shape_kinds[idx] = int(ShapeKind.PLANE)
        self.shape_positions[idx] = point
        self.shape_radii[idx] = 0.0
        self.shape_normals[idx] = unit_normal
        self._write_material(idx, material)
        self.num_shapes[None] = idx + 1

        self.shapes.append(PlaneInfo(index=idx, point=point, normal=unit_normal, material=material))
        self.invalidate()
        return idx

    def set_shape_material(self, index: int, material: Material) -> None:
        """Replace the material of an existing shape.

        Hit records taken before the change keep their own material copy.

        Raises:
            ValueError: If index does not name a shape.
        """
        if not 0 <= index < len(self.shapes):
            raise ValueError(f"Invalid shape index: {index}")
        self._write_material(index, material)
        self.shapes[index].material = material
        self.invalidate()

    def add_point_light(
        self,
        position: tuple[float, float, float],
        color: tuple[float, float, float] = (1.0, 1.0, 1.0),
        strength: float = 1.0,
    ) -> int:
        """Add a point light to the end of the light list.

        Returns:
            The slot index of the added light.

        Raises:
            ValueError: If the light parameters are invalid.
            RuntimeError: If the maximum number of lights is exceeded.
        """
        light = PointLight(position=_as_vec3("position", position), color=color, strength=strength)
        return self.add_light(light)

    def add_light(self, light: PointLight) -> int:
        """Add a prepared light record to the end of the light list."""
        idx = len(self.lights)
        if idx >= self.max_lights:
            raise RuntimeError(f"Maximum number of lights ({self.max_lights}) exceeded")

        self.light_kinds[idx] = int(light.kind)
        self.light_positions[idx] = light.position
        self.light_colors[idx] = light.color
        self.light_strengths[idx] = light.strength
        self.num_lights[None] = idx + 1

        self.lights.append(light)
        self.invalidate()
        return idx

    def clear(self) -> None:
        """Remove all shapes and lights and invalidate accumulation."""
        self.shapes.clear()
        self.lights.clear()
        self.num_shapes[None] = 0
        self.num_lights[None] = 0
        self.invalidate()

    @property
    def shape_count(self) -> int:
        """Number of shapes in the scene."""
        return len(self.shapes)

    @property
    def light_count(self) -> int:
        """Number of lights in the scene."""
        return len(self.lights)

    # =========================================================================
    # Accumulation State
    # =========================================================================

    def invalidate(self) -> None:
        """Force the next frame to restart the running mean."""
        if self.frame_index != INVALID_FRAME_INDEX:
            logger.debug("Accumulation invalidated after %d frames", self.frame_index)
        self.frame_index = INVALID_FRAME_INDEX

    def resize(self, width: int, height: int) -> None:
        """Reallocate the accumulation buffer for a new resolution.

        The buffer and frame index are invalidated together, even when the
        size is unchanged.

        Raises:
            ValueError: If a dimension is not positive.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        logger.debug("Scene accumulation resized to %dx%d", width, height)
        self.width = width
        self.height = height
        self.accumulation = np.zeros(width * height * CHANNELS, dtype=np.float32)
        self.invalidate()

    @property
    def accumulation_valid(self) -> bool:
        """True if the next frame may be merged into the running mean."""
        return (
            self.frame_index != INVALID_FRAME_INDEX
            and self.accumulation.size == self.width * self.height * CHANNELS
            and self.accumulation.size > 0
        )

    # =========================================================================
    # Kernel-side Queries
    # =========================================================================

    @ti.func
    def shape_material(self, i: ti.i32) -> SurfaceMaterial:
        """Copy the material of shape i into a SurfaceMaterial struct."""
        return SurfaceMaterial(
            albedo=self.material_albedos[i],
            roughness=self.material_roughness[i],
            specular_chance=self.material_specular_chances[i],
            emission=self.material_emissions[i],
            emission_color=self.material_emission_colors[i],
        )

    @ti.func
    def hit_shape(self, i: ti.i32, ray: Ray, interval: Interval) -> HitRecord:
        """Intersect a ray with shape i, dispatching on its kind."""
        rec = miss_record()
        kind = self.shape_kinds[i]
        if kind == int(ShapeKind.SPHERE):
            sphere = Sphere(
                center=self.shape_positions[i],
                radius=self.shape_radii[i],
                material=self.shape_material(i),
            )
            rec = hit_sphere(sphere, ray, interval)
        elif kind == int(ShapeKind.PLANE):
            plane = Plane(
                point=self.shape_positions[i],
                normal=self.shape_normals[i],
                material=self.shape_material(i),
            )
            rec = hit_plane(plane, ray, interval)
        return rec

    @ti.func
    def hit(self, ray: Ray, interval: Interval) -> HitRecord:
        """Find the closest intersection over all shapes.

        Folds over the ordered shape list, narrowing the upper bound of the
        interval to the best t found so far.

        Args:
            ray: The ray to trace.
            interval: Half-open range of acceptable t values.

        Returns:
            The global minimum-t HitRecord, or a miss record.
        """
        closest_t = interval.max_t
        result = miss_record()
        for i in range(self.num_shapes[None]):
            rec = self.hit_shape(i, ray, Interval(min_t=interval.min_t, max_t=closest_t))
            if rec.hit == 1:
                closest_t = rec.t
                result = rec
        return result

    @ti.func
    def occluded(self, ray: Ray, interval: Interval) -> ti.i32:
        """Test if any shape intersects the ray within the interval.

        Stops testing after the first hit; used for shadow rays.

        Returns:
            1 if any shape was hit, 0 otherwise.
        """
        hit_any = 0
        for i in range(self.num_shapes[None]):
            if hit_any == 0:
                rec = self.hit_shape(i, ray, interval)
                if rec.hit == 1:
                    hit_any = 1
        return hit_any

    @ti.func
    def lights_available(self) -> ti.i32:
        """Number of lights, for use inside kernels."""
        return self.num_lights[None]

    @ti.func
    def light_position(self, i: ti.i32) -> vec3:
        """World-space position of light i."""
        return self.light_positions[i]

    @ti.func
    def light_sample(self, i: ti.i32) -> vec3:
        """Radiance light i emits toward any point."""
        result = vec3(0.0, 0.0, 0.0)
        if self.light_kinds[i] == int(LightKind.POINT):
            result = point_light_sample(self.light_colors[i], self.light_strengths[i])
        return result

    def __repr__(self) -> str:
        return (
            f"Scene(shapes={self.shape_count}, lights={self.light_count}, "
            f"frame_index={self.frame_index})"
        )
