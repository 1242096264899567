"""Tests for the pinhole camera.

Tests cover:
- Matrix construction (projection, view and their inverses)
- Ray direction generation: unit length, orientation, row order
- Host updates: resize, translate, rotate, state snapshots
"""

import math

import numpy as np
import pytest


class TestCameraMatrices:
    """Tests for projection and view matrices."""

    def test_inverses(self):
        """Test that stored inverses invert the matrices."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=64, height=32)
        assert np.allclose(camera.projection @ camera.inverse_projection, np.eye(4), atol=1e-9)
        assert np.allclose(camera.view @ camera.inverse_view, np.eye(4), atol=1e-9)

    def test_view_maps_position_to_origin(self):
        """Test that the view matrix puts the camera at the origin looking down -Z."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(position=(1.0, 2.0, 3.0), forward=(0.0, 0.0, -1.0))
        eye = camera.view @ np.array([1.0, 2.0, 3.0, 1.0])
        ahead = camera.view @ np.array([1.0, 2.0, 2.0, 1.0])
        assert np.allclose(eye[:3], 0.0)
        assert np.allclose(ahead[:3], (0.0, 0.0, -1.0))

    def test_projection_depth_range(self):
        """Test that near maps to depth 0 and far to depth 1."""
        from src.pathtracer.camera.camera import perspective_rh

        proj = perspective_rh(math.radians(60.0), 1.5, 0.1, 100.0)
        near = proj @ np.array([0.0, 0.0, -0.1, 1.0])
        far = proj @ np.array([0.0, 0.0, -100.0, 1.0])
        assert abs(near[2] / near[3]) < 1e-9
        assert abs(far[2] / far[3] - 1.0) < 1e-9

    def test_invalid_construction(self):
        """Test validation of camera parameters."""
        from src.pathtracer.camera.camera import Camera

        with pytest.raises(ValueError, match="vertical_fov"):
            Camera(vertical_fov=0.0)
        with pytest.raises(ValueError, match="Clip planes"):
            Camera(near_clip=10.0, far_clip=1.0)
        with pytest.raises(ValueError, match="parallel"):
            Camera(forward=(0.0, 1.0, 0.0))
        with pytest.raises(ValueError, match="non-zero"):
            Camera(forward=(0.0, 0.0, 0.0))


class TestRayDirections:
    """Tests for per-pixel ray directions."""

    def test_single_pixel_looks_forward(self):
        """Test that a 1x1 image's only ray is the forward vector."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(forward=(1.0, 0.0, -1.0))
        directions = camera.ray_directions().as_array()
        assert directions.shape == (1, 1, 3)
        assert np.allclose(directions[0, 0], camera.forward, atol=1e-6)

    def test_directions_are_unit_length(self):
        """Test that every direction is normalized."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(vertical_fov=70.0, width=17, height=9)
        camera.rotate((40.0, 25.0))
        directions = camera.ray_directions().as_array()
        lengths = np.linalg.norm(directions, axis=2)
        assert np.allclose(lengths, 1.0, atol=1e-5)

    def test_top_row_first(self):
        """Test that row 0 looks up and columns run left to right."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=4, height=4)
        directions = camera.ray_directions().as_array()
        assert directions[0, 0, 1] > 0.0
        assert directions[3, 0, 1] < 0.0
        assert directions[0, 0, 0] < 0.0
        assert directions[0, 3, 0] > 0.0

    def test_corner_angle_matches_fov(self):
        """Test that edge pixel centers sit just inside the field of view."""
        from src.pathtracer.camera.camera import Camera

        height = 100
        camera = Camera(vertical_fov=90.0, width=1, height=height)
        directions = camera.ray_directions().as_array()
        top = directions[0, 0]
        # Pixel center of the top row is at v = 1 - 1/height
        expected = math.atan(1.0 - 1.0 / height)
        assert abs(math.atan2(top[1], -top[2]) - expected) < 1e-5

    def test_sequence_is_finite_and_restartable(self):
        """Test iterating rows twice yields the same data."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=5, height=3)
        sequence = camera.ray_directions()
        first = list(sequence)
        second = list(sequence)

        assert len(sequence) == 3
        assert len(first) == 3
        assert all(row.shape == (5, 3) for row in first)
        for a, b in zip(first, second):
            assert np.array_equal(a, b)
        assert np.allclose(np.stack(first), sequence.as_array())

    def test_row_out_of_range(self):
        """Test that asking for a missing row raises IndexError."""
        from src.pathtracer.camera.camera import Camera

        sequence = Camera(width=2, height=2).ray_directions()
        with pytest.raises(IndexError):
            sequence.row(2)

    def test_direction_grid_is_memoized(self):
        """Test that the grid is reused until the camera changes."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=8, height=8)
        grid = camera.direction_grid()
        assert camera.direction_grid() is grid
        assert grid.dtype == np.float32
        assert grid.flags["C_CONTIGUOUS"]

        camera.rotate((10.0, 0.0))
        assert camera.direction_grid() is not grid


class TestCameraUpdates:
    """Tests for resize, translate and rotate."""

    def test_resize_is_noop_when_unchanged(self):
        """Test that resizing to the same size leaves the version alone."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=10, height=10)
        version = camera.version
        camera.on_resize(10, 10)
        assert camera.version == version

    def test_resize_recomputes_projection(self):
        """Test that a new aspect ratio changes the projection."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(width=10, height=10)
        before = camera.projection
        version = camera.version
        camera.on_resize(20, 10)

        assert camera.version > version
        assert (camera.width, camera.height) == (20, 10)
        assert abs(camera.projection[0, 0] - before[0, 0] / 2.0) < 1e-9
        assert camera.direction_grid().shape == (10, 20, 3)

    def test_resize_rejects_non_positive(self):
        """Test that zero-sized images are rejected."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera()
        with pytest.raises(ValueError, match="positive"):
            camera.on_resize(0, 10)

    def test_translate(self):
        """Test that translate moves the position and bumps the version."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(position=(0.0, 0.0, 3.0))
        version = camera.version
        camera.translate((0.0, 1.0, 0.0), 2.5)

        assert np.allclose(camera.position, (0.0, 2.5, 3.0))
        assert camera.version > version

    def test_rotate_yaw(self):
        """Test that a leftward mouse move turns the camera left."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(forward=(0.0, 0.0, -1.0))
        sensitivity = 0.002
        camera.rotate((-(math.pi / 2.0) / sensitivity, 0.0), sensitivity)
        assert np.allclose(camera.forward, (-1.0, 0.0, 0.0), atol=1e-6)

    def test_rotate_pitch(self):
        """Test that an upward mouse move pitches the camera up."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera(forward=(0.0, 0.0, -1.0))
        camera.rotate((0.0, -100.0))
        assert camera.forward[1] > 0.0
        assert abs(np.linalg.norm(camera.forward) - 1.0) < 1e-9

    def test_rotate_clamps_pitch(self):
        """Test that pitch never reaches straight up."""
        from src.pathtracer.camera.camera import MAX_PITCH_COS, WORLD_UP, Camera

        camera = Camera()
        for _ in range(50):
            camera.rotate((0.0, -200.0))
        assert abs(np.dot(camera.forward, WORLD_UP)) <= MAX_PITCH_COS
        assert np.all(np.isfinite(camera.view))

    def test_rotate_without_movement(self):
        """Test that a zero mouse delta changes nothing."""
        from src.pathtracer.camera.camera import Camera

        camera = Camera()
        version = camera.version
        camera.rotate((0.0, 0.0))
        assert camera.version == version

    def test_right_vector(self):
        """Test right = forward x up for the default camera."""
        from src.pathtracer.camera.camera import Camera

        assert np.allclose(Camera().right, (1.0, 0.0, 0.0))

    def test_state_key_compares_by_value(self):
        """Test that state keys depend on the camera state, not the object."""
        from src.pathtracer.camera.camera import Camera

        first = Camera(position=(1.0, 2.0, 3.0), width=4, height=3)
        second = Camera(position=(1.0, 2.0, 3.0), width=4, height=3)
        assert first.state_key() == second.state_key()

        second.translate((1.0, 0.0, 0.0), 0.25)
        assert first.state_key() != second.state_key()

        assert Camera(width=4, height=3).state_key() != Camera(width=4, height=2).state_key()
        assert Camera(vertical_fov=45.0).state_key() != Camera(vertical_fov=50.0).state_key()
