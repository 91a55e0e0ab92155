"""Pytest configuration for tinytracer tests.

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


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    Spheres, lights, materials and the floor live in module-level fields, so
    this keeps tests isolated from each other.
    """
    # Import here so the fields are created after ti.init()
    from tinytracer.materials.material import clear_materials
    from tinytracer.scene.intersection import clear_scene

    def _clear_all():
        # Also restores the default checkerboard floor
        clear_scene()
        clear_materials()

        try:
            from tinytracer.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            # Integrator not initialized or render target not set up yet
            pass

    _clear_all()

    yield

    _clear_all()
