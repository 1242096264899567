"""Scene module for shape storage, lights and accumulation state.

Components:
    scene: Scene container holding shapes, materials, lights and the running mean
    presets: Factory functions for ready-made scenes

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for geometric data
    - One material copy per shape slot
    - Light slots read directly by the shading kernel
"""

from .presets import DefaultSceneParams, create_default_scene, create_showcase_scene
from .scene import (
    CHANNELS,
    INVALID_FRAME_INDEX,
    MAX_LIGHTS,
    MAX_SHAPES,
    PlaneInfo,
    Scene,
    ShapeInfo,
    SphereInfo,
)

__all__ = [
    "Scene",
    "SphereInfo",
    "PlaneInfo",
    "ShapeInfo",
    "MAX_SHAPES",
    "MAX_LIGHTS",
    "INVALID_FRAME_INDEX",
    "CHANNELS",
    "DefaultSceneParams",
    "create_default_scene",
    "create_showcase_scene",
]
