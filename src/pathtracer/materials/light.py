"""Light sources for direct lighting.

Lights form a small closed variant set tagged by LightKind. Only point lights
exist today; a point light radiates color * strength toward every direction
without distance falloff.

Example:
    >>> from src.pathtracer.materials.light import PointLight
    >>> key = PointLight(position=(2.0, 4.0, 2.0), color=(1.0, 0.9, 0.8), strength=2.0)
    >>> key.sample()
    (2.0, 1.8, 1.6)
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


class LightKind(IntEnum):
    """Tag of the light variant stored in scene light slots."""

    POINT = 0


@dataclass(frozen=True)
class PointLight:
    """An omnidirectional point light.

    Attributes:
        position: World-space position as (x, y, z).
        color: Light color as (R, G, B), non-negative.
        strength: Scalar intensity multiplier, non-negative.

    Raises:
        ValueError: If color or strength is negative.
    """

    position: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    strength: float = 1.0

    kind = LightKind.POINT

    def __post_init__(self) -> None:
        if len(self.position) != 3:
            raise ValueError(f"position must have 3 components, got {len(self.position)}")
        if len(self.color) != 3 or any(c < 0.0 for c in self.color):
            raise ValueError(f"color must be 3 non-negative components, got {self.color}")
        if self.strength < 0.0:
            raise ValueError(f"strength must be non-negative, got {self.strength}")

    def sample(self) -> tuple[float, float, float]:
        """Radiance emitted toward any point: color * strength."""
        return (
            self.color[0] * self.strength,
            self.color[1] * self.strength,
            self.color[2] * self.strength,
        )


@ti.func
def point_light_sample(color: vec3, strength: ti.f32) -> vec3:
    """Kernel-side counterpart of PointLight.sample()."""
    return color * strength
