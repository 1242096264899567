"""Stylized surface material model.

A material is plain data: a diffuse albedo, a roughness and a specular chance
describing the stylized specular lobe, and an emission strength with its color.
The model is not energy conserving and is not meant to be.

Two representations exist:
- Material: the host-side description, validated on construction.
- SurfaceMaterial: the Taichi struct copied by value into every HitRecord, so a
  hit never refers back into scene storage.

Example:
    >>> from src.pathtracer.materials.material import Material
    >>> red = Material(albedo=(0.8, 0.1, 0.1), roughness=0.5)
    >>> lamp = Material(albedo=(1.0, 1.0, 1.0), emission=4.0)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class SurfaceMaterial:
    """Kernel-side material snapshot.

    Attributes:
        albedo: Diffuse reflectance (RGB).
        roughness: Blend between diffuse and mirror response, in [0, 1].
        specular_chance: Probability of the specular lobe, in [0, 1].
        emission: Emission strength (non-negative).
        emission_color: Emission color (RGB).
    """

    albedo: vec3
    roughness: ti.f32
    specular_chance: ti.f32
    emission: ti.f32
    emission_color: vec3


@ti.func
def emitted_radiance(material: SurfaceMaterial) -> vec3:
    """Radiance emitted by a surface with this material."""
    return material.emission * material.emission_color


def _check_color(name: str, value: tuple[float, float, float], upper: float | None) -> None:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    for c in value:
        if c < 0.0 or (upper is not None and c > upper):
            bound = f"[0, {upper}]" if upper is not None else ">= 0"
            raise ValueError(f"{name} components must be {bound}, got {value}")


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class Material:
    """Host-side description of a surface material.

    Attributes:
        albedo: Diffuse reflectance color as (R, G, B), each in [0, 1].
        roughness: Surface roughness in [0, 1].
        specular_chance: Probability of specular reflection in [0, 1].
        emission: Emission strength, non-negative.
        emission_color: Emission color as (R, G, B), non-negative.

    Raises:
        ValueError: If any field is outside its valid range.
    """

    albedo: tuple[float, float, float] = (0.8, 0.8, 0.8)
    roughness: float = 1.0
    specular_chance: float = 0.0
    emission: float = 0.0
    emission_color: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        _check_color("albedo", self.albedo, 1.0)
        _check_unit("roughness", self.roughness)
        _check_unit("specular_chance", self.specular_chance)
        if self.emission < 0.0:
            raise ValueError(f"emission must be non-negative, got {self.emission}")
        _check_color("emission_color", self.emission_color, None)

