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


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear world, materials, light, camera and pixel buffer around each test."""
    # Import here so module-level fields are created after ti.init()
    from src.pathtracer.camera.thin_lens import clear_camera
    from src.pathtracer.core.integrator import clear_light
    from src.pathtracer.core.render import clear_pixel_buffer
    from src.pathtracer.materials.material import clear_materials
    from src.pathtracer.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_materials()
        clear_light()
        clear_camera()
        clear_pixel_buffer()

    _clear_all()

    yield

    _clear_all()
