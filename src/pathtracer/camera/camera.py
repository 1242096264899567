"""Pinhole camera producing per-pixel world-space ray directions.

The camera keeps a position and a forward vector with world-up fixed to +Y,
and derives right-handed projection and view matrices (plus their inverses)
from them. Matrices are recomputed only when the relevant state changes:
resizing rebuilds projection and view, moving or turning rebuilds the view.

Ray directions are produced by unprojecting pixel centers:

    uv      = ((x + 0.5, y + 0.5) / (width, height)) * 2 - 1
    target  = inverse_projection @ (uv.x, uv.y, 1, 1)
    view    = normalize(target.xyz / target.w)
    world   = (inverse_view @ (view, 0)).xyz

There is no sub-pixel jitter, so the directions of a static camera are
deterministic. Rows are yielded top row first.

All matrix math runs host-side in NumPy; the resulting direction grid is
handed to the render kernel as a whole.

Example:
    >>> from src.pathtracer.camera.camera import Camera
    >>> camera = Camera(vertical_fov=45.0, near_clip=0.1, far_clip=100.0)
    >>> camera.on_resize(320, 240)
    >>> for row in camera.ray_directions():
    ...     pass  # row is a (width, 3) array of unit directions
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)

# World-up is fixed to +Y
WORLD_UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)

# |forward . up| may not exceed this, which keeps pitch about 1 degree away from vertical
MAX_PITCH_COS = 0.9998


# =============================================================================
# Matrix and Quaternion Helpers
# =============================================================================


def perspective_rh(vertical_fov: float, aspect_ratio: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection with depth mapped to [0, 1].

    Args:
        vertical_fov: Vertical field of view in radians.
        aspect_ratio: Width divided by height.
        near: Near clip distance (positive).
        far: Far clip distance (greater than near).

    Returns:
        A 4x4 float64 matrix applied as M @ v.
    """
    f = 1.0 / math.tan(0.5 * vertical_fov)
    r = far / (near - far)
    return np.array(
        [
            [f / aspect_ratio, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, r, r * near],
            [0.0, 0.0, -1.0, 0.0],
        ],
        dtype=np.float64,
    )


def look_at_rh(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Right-handed view matrix looking from eye toward target."""
    f = target - eye
    f = f / np.linalg.norm(f)
    s = np.cross(f, up)
    s = s / np.linalg.norm(s)
    u = np.cross(s, f)
    return np.array(
        [
            [s[0], s[1], s[2], -np.dot(s, eye)],
            [u[0], u[1], u[2], -np.dot(u, eye)],
            [-f[0], -f[1], -f[2], np.dot(f, eye)],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def quat_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Unit quaternion (w, x, y, z) rotating by angle radians about axis."""
    axis = axis / np.linalg.norm(axis)
    half = 0.5 * angle
    return np.array([math.cos(half), *(axis * math.sin(half))], dtype=np.float64)


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b (apply b first, then a)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector v by unit quaternion q."""
    w = q[0]
    u = q[1:]
    return 2.0 * np.dot(u, v) * u + (w * w - np.dot(u, u)) * v + 2.0 * w * np.cross(u, v)


# =============================================================================
# Ray Direction Sequence
# =============================================================================


class RayDirections:
    """Lazy, finite, restartable grid of unit world-space ray directions.

    Iterating yields one (width, 3) float32 array per image row, top row
    first. Each iteration starts over from the top; rows are computed on
    demand from a snapshot of the camera matrices taken at creation.
    """

    def __init__(
        self,
        inverse_projection: np.ndarray,
        inverse_view: np.ndarray,
        width: int,
        height: int,
    ) -> None:
        self._inverse_projection = inverse_projection.copy()
        self._inverse_view = inverse_view.copy()
        self.width = width
        self.height = height

    def __len__(self) -> int:
        return self.height

    def __iter__(self) -> Iterator[npt.NDArray[np.float32]]:
        for row in range(self.height):
            yield self.row(row)

    def row(self, row: int) -> npt.NDArray[np.float32]:
        """Directions for one image row, counted from the top.

        Raises:
            IndexError: If row is outside the image.
        """
        if not 0 <= row < self.height:
            raise IndexError(f"Row {row} outside image of height {self.height}")
        y = self.height - 1 - row
        xs = np.arange(self.width, dtype=np.float64)
        ys = np.full(self.width, float(y))
        return self._unproject(xs, ys)

    def as_array(self) -> npt.NDArray[np.float32]:
        """All directions as a contiguous (height, width, 3) float32 array."""
        ys, xs = np.meshgrid(
            np.arange(self.height - 1, -1, -1, dtype=np.float64),
            np.arange(self.width, dtype=np.float64),
            indexing="ij",
        )
        directions = self._unproject(xs.ravel(), ys.ravel())
        return np.ascontiguousarray(directions.reshape(self.height, self.width, 3))

    def _unproject(self, xs: np.ndarray, ys: np.ndarray) -> npt.NDArray[np.float32]:
        u = (xs + 0.5) / self.width * 2.0 - 1.0
        v = (ys + 0.5) / self.height * 2.0 - 1.0
        ndc = np.stack([u, v, np.ones_like(u), np.ones_like(u)])

        target = self._inverse_projection @ ndc
        view_dir = target[:3] / target[3]
        view_dir = view_dir / np.linalg.norm(view_dir, axis=0)

        world = self._inverse_view[:3, :3] @ view_dir
        world = world / np.linalg.norm(world, axis=0)
        return world.T.astype(np.float32)


# =============================================================================
# Camera
# =============================================================================


class Camera:
    """Pinhole camera with memoized projection and view matrices.

    Attributes:
        vertical_fov: Vertical field of view in degrees.
        near_clip: Near clip distance.
        far_clip: Far clip distance.
        version: Incremented on every change that alters the generated rays.
    """

    def __init__(
        self,
        vertical_fov: float = 45.0,
        near_clip: float = 0.1,
        far_clip: float = 100.0,
        position: tuple[float, float, float] = (0.0, 0.0, 3.0),
        forward: tuple[float, float, float] = (0.0, 0.0, -1.0),
        width: int = 1,
        height: int = 1,
    ) -> None:
        """Create a camera and compute its matrices.

        Raises:
            ValueError: If the field of view, clip planes, forward vector or
                image size are invalid.
        """
        if not 0.0 < vertical_fov < 180.0:
            raise ValueError(f"vertical_fov must be in (0, 180) degrees, got {vertical_fov}")
        if not 0.0 < near_clip < far_clip:
            raise ValueError(
                f"Clip planes must satisfy 0 < near < far, got near={near_clip}, far={far_clip}"
            )
        _check_size(width, height)

        self.vertical_fov = float(vertical_fov)
        self.near_clip = float(near_clip)
        self.far_clip = float(far_clip)
        self._position = np.array(position, dtype=np.float64)
        self._forward = _unit_forward(np.array(forward, dtype=np.float64))
        self._width = width
        self._height = height
        self.version = 0

        self._projection = np.eye(4)
        self._inverse_projection = np.eye(4)
        self._view = np.eye(4)
        self._inverse_view = np.eye(4)
        self._directions: npt.NDArray[np.float32] | None = None

        self._recalculate_projection()
        self._recalculate_view()

    # =========================================================================
    # Read-only State
    # =========================================================================

    @property
    def position(self) -> npt.NDArray[np.float64]:
        """Camera position in world space."""
        return self._position.copy()

    @property
    def forward(self) -> npt.NDArray[np.float64]:
        """Unit view direction in world space."""
        return self._forward.copy()

    @property
    def right(self) -> npt.NDArray[np.float64]:
        """Unit right vector, forward x up."""
        right = np.cross(self._forward, WORLD_UP)
        return right / np.linalg.norm(right)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self._height

    @property
    def projection(self) -> npt.NDArray[np.float64]:
        return self._projection.copy()

    @property
    def inverse_projection(self) -> npt.NDArray[np.float64]:
        return self._inverse_projection.copy()

    @property
    def view(self) -> npt.NDArray[np.float64]:
        return self._view.copy()

    @property
    def inverse_view(self) -> npt.NDArray[np.float64]:
        return self._inverse_view.copy()

    # =========================================================================
    # Host Updates
    # =========================================================================

    def on_resize(self, width: int, height: int) -> None:
        """Adopt a new image size.

        Does nothing if the size is unchanged; otherwise recomputes the
        projection, the view and both inverses.

        Raises:
            ValueError: If a dimension is not positive.
        """
        _check_size(width, height)
        if width == self._width and height == self._height:
            return
        logger.debug("Camera resized from %dx%d to %dx%d", self._width, self._height, width, height)
        self._width = width
        self._height = height
        self._recalculate_projection()
        self._recalculate_view()

    def translate(self, direction: tuple[float, float, float], distance: float) -> None:
        """Move the camera by direction * distance and recompute the view."""
        self._position = self._position + np.asarray(direction, dtype=np.float64) * distance
        self._recalculate_view()

    def rotate(self, mouse_delta: tuple[float, float], sensitivity: float = 0.002) -> None:
        """Turn the camera from a mouse movement.

        Composes a yaw rotation about world-up with a pitch rotation about the
        current right vector and applies it to forward. Pitch updates that
        would bring forward within MAX_PITCH_COS of straight up or down are
        dropped; yaw still applies.

        Args:
            mouse_delta: Mouse movement (dx, dy) in pixels.
            sensitivity: Radians of rotation per pixel of movement.
        """
        dx, dy = float(mouse_delta[0]), float(mouse_delta[1])
        if dx == 0.0 and dy == 0.0:
            return

        yaw = quat_from_axis_angle(WORLD_UP, -dx * sensitivity)
        pitch = quat_from_axis_angle(self.right, -dy * sensitivity)
        rotated = _unit_forward(quat_rotate(quat_multiply(pitch, yaw), self._forward))

        if abs(float(np.dot(rotated, WORLD_UP))) > MAX_PITCH_COS:
            rotated = _unit_forward(quat_rotate(yaw, self._forward))

        self._forward = rotated
        self._recalculate_view()

    # =========================================================================
    # Ray Generation
    # =========================================================================

    def ray_directions(self) -> RayDirections:
        """Unit world-space ray directions for every pixel, top row first."""
        return RayDirections(self._inverse_projection, self._inverse_view, self._width, self._height)

    def direction_grid(self) -> npt.NDArray[np.float32]:
        """Memoized (height, width, 3) direction array for the render kernel."""
        if self._directions is None:
            self._directions = self.ray_directions().as_array()
        return self._directions

    def _recalculate_projection(self) -> None:
        self._projection = perspective_rh(
            math.radians(self.vertical_fov),
            self._width / self._height,
            self.near_clip,
            self.far_clip,
        )
        self._inverse_projection = np.linalg.inv(self._projection)
        self._changed()

    def _recalculate_view(self) -> None:
        self._view = look_at_rh(self._position, self._position + self._forward, WORLD_UP)
        self._inverse_view = np.linalg.inv(self._view)
        self._changed()

    def _changed(self) -> None:
        self._directions = None
        self.version += 1

    def state_key(self) -> tuple:
        """Snapshot of every value the generated rays depend on.

        Two cameras with equal keys produce identical rays, whichever object
        they are. The progressive renderer compares keys between frames to
        decide whether accumulation may continue.
        """
        return (
            tuple(self._position.tolist()),
            tuple(self._forward.tolist()),
            self.vertical_fov,
            self.near_clip,
            self.far_clip,
            self._width,
            self._height,
        )

    def __repr__(self) -> str:
        return (
            f"Camera(position={tuple(self._position)}, forward={tuple(self._forward)}, "
            f"size={self._width}x{self._height}, vfov={self.vertical_fov})"
        )


def _check_size(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")


def _unit_forward(forward: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(forward)
    if length < 1e-12:
        raise ValueError("forward must be non-zero")
    unit = forward / length
    if abs(float(np.dot(unit, WORLD_UP))) > MAX_PITCH_COS:
        raise ValueError("forward must not be parallel to world-up")
    return unit
