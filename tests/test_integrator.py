"""Tests for the radiance estimator and the frame sampling loop.

Tests cover:
- Exact results for misses and pure emitters
- Deterministic mirror paths
- Energy conservation in closed furnaces (diffuse and glass)
- Sampling loop accumulation into a PixelGrid
- Argument validation

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


class TestRadianceExact:
    """Cases where the estimator has no variance."""

    def test_miss_is_black(self):
        """A ray that hits nothing returns exactly zero."""
        from src.smallpt.core.integrator import estimate_radiance

        assert estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == (0.0, 0.0, 0.0)

    def test_zero_albedo_emitter(self):
        """A black emitter returns exactly its emission."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere(100.0, (0.0, 0.0, 0.0), emission=(2.0, 3.0, 4.0))

        result = estimate_radiance((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), num_samples=64)
        assert result == (2.0, 3.0, 4.0)

    def test_emitter_past_roulette_depth(self):
        """Emission is counted even when roulette then ends the path."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere(100.0, (0.0, 0.0, 0.0), emission=(1.5, 1.5, 1.5))

        assert estimate_radiance((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), depth=40) == (1.5, 1.5, 1.5)

    def test_mirror_reflects_light(self):
        """A ray bounced by a mirror into a light sees the light."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import MaterialKind, SceneManager

        scene = SceneManager()
        scene.add_sphere(
            1.0, (0.0, 0.0, 0.0), color=(1.0, 1.0, 1.0), material=MaterialKind.SPECULAR
        )
        scene.add_sphere(2.0, (0.0, 0.0, 20.0), emission=(3.0, 3.0, 3.0))

        result = estimate_radiance((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), num_samples=16)
        assert result == pytest.approx((3.0, 3.0, 3.0), abs=1e-12)

    def test_mirror_reflects_away_from_light(self):
        """A ray bounced away from the light sees nothing."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import MaterialKind, SceneManager

        scene = SceneManager()
        scene.add_sphere(
            1.0, (0.0, 0.0, 0.0), color=(1.0, 1.0, 1.0), material=MaterialKind.SPECULAR
        )
        scene.add_sphere(2.0, (0.0, 0.0, 20.0), emission=(3.0, 3.0, 3.0))

        result = estimate_radiance((0.9, 0.0, 5.0), (0.0, 0.0, -1.0), num_samples=16)
        assert result == (0.0, 0.0, 0.0)

    def test_mirror_tints_by_albedo(self):
        """The mirror albedo scales the reflected radiance per channel."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import MaterialKind, SceneManager

        scene = SceneManager()
        scene.add_sphere(
            1.0, (0.0, 0.0, 0.0), color=(1.0, 0.5, 0.25), material=MaterialKind.SPECULAR
        )
        scene.add_sphere(2.0, (0.0, 0.0, 20.0), emission=(4.0, 4.0, 4.0))

        result = estimate_radiance((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert result == pytest.approx((4.0, 2.0, 1.0), abs=1e-12)


class TestRadianceFurnace:
    """Energy balance in closed scenes with known answers."""

    def test_diffuse_furnace(self):
        """Inside a sphere with emission E and albedo a, radiance is E / (1 - a)."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere(10.0, (0.0, 0.0, 0.0), emission=(0.5, 0.5, 0.5), color=(0.5, 0.5, 0.5))

        result = estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), num_samples=20000)
        assert result == pytest.approx((1.0, 1.0, 1.0), abs=0.05)

    def test_diffuse_furnace_past_roulette_depth(self):
        """Russian roulette keeps the estimate unbiased."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere(10.0, (0.0, 0.0, 0.0), emission=(0.5, 0.5, 0.5), color=(0.5, 0.5, 0.5))

        result = estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), depth=10, num_samples=20000)
        assert result == pytest.approx((1.0, 1.0, 1.0), abs=0.05)

    def test_glass_furnace(self):
        """A clear glass sphere inside a uniform emitter neither adds nor loses energy."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.manager import MaterialKind, SceneManager

        scene = SceneManager()
        scene.add_sphere(100.0, (0.0, 0.0, 0.0), emission=(1.0, 1.0, 1.0))
        scene.add_sphere(
            10.0, (0.0, 0.0, 0.0), color=(1.0, 1.0, 1.0), material=MaterialKind.REFRACTIVE
        )

        for origin in [(0.0, 0.0, 50.0), (3.0, 4.0, 50.0), (9.5, 0.0, 50.0)]:
            result = estimate_radiance(origin, (0.0, 0.0, -1.0), num_samples=4000)
            assert result == pytest.approx((1.0, 1.0, 1.0), abs=0.02)

    def test_radiance_never_negative(self):
        """Estimates inside the Cornell box are finite and non-negative."""
        from src.smallpt.core.integrator import estimate_radiance
        from src.smallpt.scene.cornell_box import create_cornell_box_scene

        create_cornell_box_scene()
        result = estimate_radiance((50.0, 40.0, 100.0), (0.0, 0.0, -1.0), num_samples=256)
        assert all(np.isfinite(result))
        assert min(result) >= 0.0


class TestEstimateRadianceArguments:
    """Argument validation for estimate_radiance."""

    def test_zero_samples(self):
        from src.smallpt.core.integrator import estimate_radiance

        with pytest.raises(ValueError, match="num_samples"):
            estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), num_samples=0)

    @pytest.mark.parametrize("depth", [-1, -20])
    def test_negative_start_depth(self, depth):
        """Start depths below zero are rejected before any tracing."""
        from src.smallpt.core.integrator import estimate_radiance

        with pytest.raises(ValueError, match="depth must be non-negative"):
            estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=depth)

    def test_negative_depth_limit(self):
        from src.smallpt.core.integrator import estimate_radiance

        with pytest.raises(ValueError, match="max_depth"):
            estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=-1)


class TestRenderFrame:
    """Tests for the per-frame sampling loop."""

    @pytest.fixture
    def cornell_setup(self):
        """Upload the Cornell box and set up its camera for 32x24."""
        from src.smallpt.camera.pinhole import setup_camera
        from src.smallpt.scene.cornell_box import create_cornell_box_scene

        scene, camera = create_cornell_box_scene()
        setup_camera(camera, 32, 24)
        yield scene, camera
        scene.clear()

    def test_frame_values_bounded_with_clamping(self, cornell_setup):
        """One clamped frame stays within [0, 1] per channel."""
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        grid = PixelGrid(32, 24)
        render_frame(grid, samples=1)
        image = grid.to_numpy()
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert image.mean() > 0.0

    def test_prefilled_grid_only_grows(self, cornell_setup):
        """Rendering adds into existing contents."""
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        grid = PixelGrid(32, 24)
        grid.fill(0.25)
        render_frame(grid, samples=1)
        assert grid.to_numpy().min() >= 0.25

    def test_row_range_limits_rows(self, cornell_setup):
        """Only the requested view rows are written."""
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        grid = PixelGrid(32, 24)
        # View rows 0..3 are the bottom four image rows
        render_frame(grid, samples=1, row_range=(0, 4))
        image = grid.to_numpy()
        assert image[:20].sum() == 0.0
        assert image[20:].sum() > 0.0

    def test_empty_row_range_is_noop(self, cornell_setup):
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        grid = PixelGrid(32, 24)
        render_frame(grid, samples=1, row_range=(5, 5))
        assert grid.total() == (0.0, 0.0, 0.0)

    def test_invalid_row_range(self, cornell_setup):
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        grid = PixelGrid(32, 24)
        with pytest.raises(ValueError, match="Row range"):
            render_frame(grid, samples=1, row_range=(10, 30))

    def test_invalid_samples(self, cornell_setup):
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        with pytest.raises(ValueError, match="samples"):
            render_frame(PixelGrid(32, 24), samples=0)

    def test_requires_camera(self):
        """Rendering before setup_camera raises RuntimeError."""
        from src.smallpt.camera.pinhole import _camera_initialized
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        previous = _camera_initialized[None]
        _camera_initialized[None] = 0
        try:
            with pytest.raises(RuntimeError, match="setup_camera"):
                render_frame(PixelGrid(4, 4))
        finally:
            _camera_initialized[None] = previous

    def test_empty_scene_renders_black(self):
        """With no spheres every pixel stays at zero."""
        from src.smallpt.camera.pinhole import PinholeCamera, setup_camera
        from src.smallpt.core.framebuffer import PixelGrid
        from src.smallpt.core.integrator import render_frame

        setup_camera(PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0)), 8, 8)
        grid = PixelGrid(8, 8)
        render_frame(grid, samples=2)
        assert grid.total() == (0.0, 0.0, 0.0)
