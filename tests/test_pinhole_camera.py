"""Unit tests for the pinhole camera module.

Tests cover:
- Camera setup and image-plane basis computation
- Ray generation for the image center and corners
- Tent-jittered sub-pixel rays
- Invalid configurations
"""

import math

import pytest
import taichi as ti

CORNELL_DIRECTION = (0.0, -0.042612, -1.0)


def _cornell_camera():
    from src.smallpt.camera.pinhole import PinholeCamera

    return PinholeCamera(origin=(50.0, 52.0, 295.6), direction=CORNELL_DIRECTION, fov=0.5135)


def _unit(v):
    n = math.sqrt(sum(c * c for c in v))
    return tuple(c / n for c in v)


class TestCameraSetup:
    """Tests for camera setup and basis computation."""

    def test_basis_vectors(self):
        """cx spans the width, cy is perpendicular to cx and the view direction."""
        from src.smallpt.camera.pinhole import get_camera_info, setup_camera

        setup_camera(_cornell_camera(), 1024, 768)
        info = get_camera_info()

        cx = info["cx"]
        cy = info["cy"]
        d = info["direction"]
        assert cx == pytest.approx((1024 * 0.5135 / 768, 0.0, 0.0), abs=1e-12)
        assert sum(a * b for a, b in zip(cy, d)) == pytest.approx(0.0, abs=1e-12)
        assert sum(a * b for a, b in zip(cy, cx)) == pytest.approx(0.0, abs=1e-12)
        assert math.sqrt(sum(c * c for c in cy)) == pytest.approx(0.5135, abs=1e-12)
        # cy points up in the image
        assert cy[1] > 0.0

    def test_direction_is_normalized(self):
        """The stored view direction has unit length."""
        from src.smallpt.camera.pinhole import get_camera_info, setup_camera

        setup_camera(_cornell_camera(), 64, 48)
        assert get_camera_info()["direction"] == pytest.approx(_unit(CORNELL_DIRECTION), abs=1e-12)

    def test_initialized_flag(self):
        """setup_camera marks the camera as ready."""
        from src.smallpt.camera.pinhole import is_camera_initialized, setup_camera

        setup_camera(_cornell_camera(), 64, 48)
        assert is_camera_initialized()

    @pytest.mark.parametrize("width, height", [(0, 48), (64, 0), (-1, 10)])
    def test_invalid_size(self, width, height):
        """Non-positive image sizes are rejected."""
        from src.smallpt.camera.pinhole import setup_camera

        with pytest.raises(ValueError, match="positive"):
            setup_camera(_cornell_camera(), width, height)

    def test_invalid_fov(self):
        """A non-positive field of view is rejected."""
        from src.smallpt.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0), fov=0.0)
        with pytest.raises(ValueError, match="Field of view"):
            setup_camera(camera, 64, 48)

    def test_zero_direction(self):
        """A zero view direction is rejected."""
        from src.smallpt.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 0.0))
        with pytest.raises(ValueError, match="zero vector"):
            setup_camera(camera, 64, 48)


class TestRayGeneration:
    """Tests for primary ray generation."""

    def test_center_ray(self):
        """The image center looks along the view direction, pushed forward 138 units."""
        from src.smallpt.camera.pinhole import CAMERA_PUSH, get_ray, setup_camera

        setup_camera(_cornell_camera(), 1024, 768)
        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = get_ray(0.5, 0.5)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        d = _unit(CORNELL_DIRECTION)
        expected_origin = (
            50.0 + d[0] * CAMERA_PUSH,
            52.0 + d[1] * CAMERA_PUSH,
            295.6 + d[2] * CAMERA_PUSH,
        )
        assert tuple(origin[None]) == pytest.approx(expected_origin, abs=1e-9)
        assert tuple(direction[None]) == pytest.approx(d, abs=1e-12)

    def test_corner_rays_spread(self):
        """u grows to the right (+x) and v grows upward (+y)."""
        from src.smallpt.camera.pinhole import get_ray, setup_camera

        setup_camera(_cornell_camera(), 1024, 768)
        left = ti.Vector.field(3, dtype=ti.f64, shape=())
        right = ti.Vector.field(3, dtype=ti.f64, shape=())
        bottom = ti.Vector.field(3, dtype=ti.f64, shape=())
        top = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            left[None] = get_ray(0.0, 0.5).direction
            right[None] = get_ray(1.0, 0.5).direction
            bottom[None] = get_ray(0.5, 0.0).direction
            top[None] = get_ray(0.5, 1.0).direction

        test_kernel()
        assert left[None][0] < 0.0 < right[None][0]
        assert bottom[None][1] < top[None][1]

    def test_subpixel_rays_stay_near_pixel(self):
        """Jittered rays for a pixel land within one pixel of its cell."""
        from src.smallpt.camera.pinhole import (
            PinholeCamera,
            get_camera_info,
            get_subpixel_ray,
            setup_camera,
        )

        width, height = 64, 48
        camera = PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0))
        setup_camera(camera, width, height)
        info = get_camera_info()
        n_samples = 4096
        u_values = ti.field(dtype=ti.f64, shape=n_samples)
        lengths = ti.field(dtype=ti.f64, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                ray = get_subpixel_ray(10, 20, i % 2, (i // 2) % 2, width, height)
                lengths[i] = ray.direction.norm()
                u_values[i] = ray.direction.x / ray.direction.z

        test_kernel()
        assert lengths.to_numpy() == pytest.approx(1.0, abs=1e-12)

        # With direction -z, x / z = -cx.x (u - 0.5)
        cx = info["cx"][0]
        dz = info["direction"][2]
        u = u_values.to_numpy() * dz / cx + 0.5
        pixel = u * width
        assert pixel.min() >= 9.75 - 1e-9
        assert pixel.max() <= 11.25 + 1e-9
        assert pixel.mean() == pytest.approx(10.5, abs=0.05)
