"""Preview module for rendered output.

Components:
    export: PNG export of RGBA8 frames via Pillow

Example:
    >>> from src.pathtracer.preview import save_png
    >>> save_png(pixels, 320, 240, "frame.png")
"""

from src.pathtracer.preview.export import compute_rmse, frame_to_array, save_png

__all__ = [
    "save_png",
    "frame_to_array",
    "compute_rmse",
]
