"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def lit_floor():
    """A white floor at z = 0 facing +Z with one light straight above it.

    The camera sits at (0, 0, 3) looking down -Z, so a 1x1 image sees the
    floor point (0, 0, 0) with n.l = 1.
    """
    from src.pathtracer.camera.camera import Camera
    from src.pathtracer.materials import Material
    from src.pathtracer.scene.scene import Scene

    scene = Scene(max_shapes=8, max_lights=8)
    scene.add_plane((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), Material(albedo=(1.0, 1.0, 1.0)))
    scene.add_point_light((0.0, 0.0, 2.0), strength=0.5)
    camera = Camera(position=(0.0, 0.0, 3.0), forward=(0.0, 0.0, -1.0), width=1, height=1)
    return scene, camera
