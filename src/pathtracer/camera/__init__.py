"""Camera module for view and ray generation.

Components:
    camera: Pinhole camera with right-handed projection and view matrices

Ray generation unprojects pixel centers through the inverse projection and
inverse view matrices:
    u in [-1, 1]: left to right across the image
    v in [-1, 1]: bottom to top across the image

Directions are produced host-side with NumPy and handed to the frame kernel as
one (height, width, 3) array.
"""

from .camera import (
    MAX_PITCH_COS,
    WORLD_UP,
    Camera,
    RayDirections,
    look_at_rh,
    perspective_rh,
)

__all__ = [
    "Camera",
    "RayDirections",
    "perspective_rh",
    "look_at_rh",
    "WORLD_UP",
    "MAX_PITCH_COS",
]
