"""Image export utilities for rendered frames.

Frames leave the renderer as RGBA8 already, so export is a matter of shaping
the bytes into an image and handing them to Pillow.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from src.pathtracer.preview.export import save_png
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer()
    >>> pixels = renderer.render(scene, camera)
    >>> save_png(pixels, camera.width, camera.height, "output.png")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.pathtracer.scene.scene import CHANNELS


def frame_to_array(pixels: bytes | npt.NDArray[np.uint8], width: int, height: int) -> npt.NDArray[np.uint8]:
    """Shape an RGBA8 frame into a (height, width, 4) array.

    Args:
        pixels: Frame bytes or array, row-major, top row first.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A (height, width, 4) uint8 view of the frame.

    Raises:
        ValueError: If the frame does not hold width * height * 4 bytes.
    """
    if isinstance(pixels, (bytes, bytearray)):
        data = np.frombuffer(pixels, dtype=np.uint8)
    else:
        data = np.asarray(pixels, dtype=np.uint8)

    expected = width * height * CHANNELS
    if data.size != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {data.size}")
    return data.reshape(height, width, CHANNELS)


def save_png(
    pixels: bytes | npt.NDArray[np.uint8],
    width: int,
    height: int,
    filepath: str,
    *,
    opaque: bool = False,
) -> None:
    """Save an RGBA8 frame as a PNG file.

    Args:
        pixels: Frame bytes or array, row-major, top row first.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).
        opaque: Drop the alpha channel and write an RGB PNG. Background
            pixels then show as black instead of transparent.
    """
    image = frame_to_array(pixels, width, height)
    if opaque:
        PILImage.fromarray(np.ascontiguousarray(image[:, :, :3]), mode="RGB").save(filepath)
    else:
        PILImage.fromarray(image, mode="RGBA").save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.integer | np.floating],
    image_b: npt.NDArray[np.integer | np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
