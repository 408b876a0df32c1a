"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields allocated by already imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Start and finish every test with no spheres and no materials."""
    # Imported here so the fields are allocated after ti.init
    from zharko.scene.intersection import clear_scene
    from zharko.scene.manager import clear_materials

    clear_scene()
    clear_materials()
    yield
    clear_scene()
    clear_materials()


@pytest.fixture
def default_camera():
    """Camera at the origin looking down -z with a 90 degree field of view."""
    from zharko.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
    setup_camera(camera)
    return camera
