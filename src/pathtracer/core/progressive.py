"""Progressive renderer: frame scheduling and running-mean accumulation.

Each call to render() produces one frame:

    1. Sync the scene's accumulation buffer with the camera size. A size
       change reallocates the buffer and restarts accumulation.
    2. Restart accumulation if the camera moved or turned, or the host asked
       for a reset.
    3. Shade every pixel with the row-parallel frame kernel. The kernel
       returning is the barrier: every row is finished before step 4.
    4. Merge the frame into the running mean on the calling thread:

           frame_index += 1
           mean += (sample - mean) / frame_index

       or, when accumulation is disabled or invalid, replace the mean with the
       sample and set frame_index to 1.
    5. Return the mean truncated to RGBA8 bytes, row-major, top row first.

Frames are strictly sequential; nothing here is safe to call concurrently for
the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.config import FrameState
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> camera.on_resize(320, 240)
    >>> renderer = ProgressiveRenderer()
    >>> pixels = renderer.render(scene, camera, FrameState())
    >>> len(pixels)
    307200
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.camera import Camera
from src.pathtracer.core.config import FrameState, RenderConfig
from src.pathtracer.core.integrator import render_frame
from src.pathtracer.scene.scene import CHANNELS, INVALID_FRAME_INDEX, Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (frames_done, total_frames)
ProgressCallback = Callable[[int, int], None]


def accumulate_frame(scene: Scene, samples: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Merge one frame into the scene's running mean.

    Args:
        scene: Scene owning the accumulation state. Its size must match the
            frame.
        samples: (height, width, 4) uint8 frame from render_frame().

    Returns:
        The running mean as a (height, width, 4) uint8 array, truncated.

    Raises:
        ValueError: If the frame size does not match the scene's buffer.
    """
    expected = scene.width * scene.height * CHANNELS
    if samples.size != expected:
        raise ValueError(
            f"Frame has {samples.size} channels but the scene buffer holds {expected} "
            f"({scene.width}x{scene.height})"
        )
    frame = samples.reshape(-1).astype(np.float32)

    if scene.accumulate and scene.accumulation_valid:
        scene.frame_index += 1
        scene.accumulation += (frame - scene.accumulation) / np.float32(scene.frame_index)
    else:
        scene.accumulation = frame
        # Without accumulation every frame stands alone
        scene.frame_index = 1 if scene.accumulate else INVALID_FRAME_INDEX

    return scene.accumulation.astype(np.uint8).reshape(scene.height, scene.width, CHANNELS)


class ProgressiveRenderer:
    """Renders frames and averages them into the scene's running mean.

    The scene remembers the camera state it was last rendered with, so moving
    or turning the camera between frames restarts accumulation without the
    host having to ask.

    Attributes:
        config: Render configuration used for every frame.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        """Initialize the progressive renderer.

        Args:
            config: Render configuration. If None, uses RenderConfig().
        """
        self.config = config if config is not None else RenderConfig()
        self._last_frame: npt.NDArray[np.uint8] | None = None

    def _sync(self, scene: Scene, camera: Camera, frame_state: FrameState) -> None:
        if scene.width != camera.width or scene.height != camera.height:
            scene.resize(camera.width, camera.height)

        camera_key = camera.state_key()
        if scene.camera_key != camera_key:
            scene.invalidate()
            scene.camera_key = camera_key

        if frame_state.reset:
            scene.invalidate()
        scene.accumulate = frame_state.accumulate

    def render_array(
        self,
        scene: Scene,
        camera: Camera,
        frame_state: FrameState | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render one frame and return the running mean as an array.

        Args:
            scene: The scene to render; its accumulation state is updated.
            camera: The camera; its current size is the output size.
            frame_state: Per-frame host flags. If None, uses FrameState().

        Returns:
            A (height, width, 4) uint8 RGBA array, top row first.
        """
        if frame_state is None:
            frame_state = FrameState()
        self._sync(scene, camera, frame_state)

        samples = render_frame(scene, camera, self.config)
        self._last_frame = accumulate_frame(scene, samples)

        if scene.frame_index == 1:
            logger.debug("Accumulation restarted at %dx%d", scene.width, scene.height)
        return self._last_frame

    def render(
        self,
        scene: Scene,
        camera: Camera,
        frame_state: FrameState | None = None,
    ) -> bytes:
        """Render one frame and return the running mean as RGBA8 bytes.

        Returns:
            width * height * 4 bytes, row-major, top row first.
        """
        return self.render_array(scene, camera, frame_state).tobytes()

    def render_progressive(
        self,
        scene: Scene,
        camera: Camera,
        num_frames: int,
        callback: ProgressCallback | None = None,
    ) -> Generator[npt.NDArray[np.uint8], None, None]:
        """Render frames one by one, yielding the running mean after each.

        Useful for previews that want to show convergence. Accumulation is
        always enabled.

        Args:
            scene: The scene to render.
            camera: The camera.
            num_frames: Number of frames to render.
            callback: Optional callback receiving (frames_done, num_frames).

        Yields:
            The running mean after each frame as a (height, width, 4) array.

        Raises:
            ValueError: If num_frames is negative.
        """
        if num_frames < 0:
            raise ValueError(f"num_frames must be non-negative, got {num_frames}")

        frame_state = FrameState(accumulate=True)
        for done in range(1, num_frames + 1):
            image = self.render_array(scene, camera, frame_state)
            if callback is not None:
                callback(done, num_frames)
            yield image

        logger.info("Rendered %d frames, %d accumulated", num_frames, max(scene.frame_index, 0))

    @property
    def last_frame(self) -> npt.NDArray[np.uint8] | None:
        """The most recently returned running mean, or None before any frame."""
        return self._last_frame

    def __repr__(self) -> str:
        return f"ProgressiveRenderer(config={self.config})"


def render(
    scene: Scene,
    camera: Camera,
    frame_state: FrameState | None = None,
    config: RenderConfig | None = None,
) -> bytes:
    """Render one progressive frame.

    Convenience wrapper around ProgressiveRenderer for hosts that keep no
    renderer object. The camera state seen by the previous frame is stored on
    the scene, so accumulation carries over between calls, even when the host
    builds a new Camera with the same pose every tick.

    Args:
        scene: The scene to render; its accumulation state is updated.
        camera: The camera; its current size is the output size.
        frame_state: Per-frame host flags. If None, uses FrameState().
        config: Render configuration. If None, uses RenderConfig().

    Returns:
        width * height * 4 bytes of RGBA8, row-major, top row first.
    """
    return ProgressiveRenderer(config).render(scene, camera, frame_state)
