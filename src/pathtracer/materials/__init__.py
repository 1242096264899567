"""Material and light model.

Components:
    material: Stylized diffuse/specular/emissive surface description
    light: Point light source (the only light variant)

Both are plain data. Host-side dataclasses are validated on construction and
copied into scene storage; kernels read them back as SurfaceMaterial structs
and light slot fields.
"""

from .light import LightKind, PointLight, point_light_sample
from .material import Material, SurfaceMaterial, emitted_radiance

__all__ = [
    "Material",
    "SurfaceMaterial",
    "emitted_radiance",
    "LightKind",
    "PointLight",
    "point_light_sample",
]
