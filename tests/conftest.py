"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field allocated by previously imported modules.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear the sphere storage before and after each test."""
    # Import here so the scene fields are created after ti.init()
    from src.smallpt.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()
