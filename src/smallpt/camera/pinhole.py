"""Pinhole camera model with tent-filtered sub-pixel ray generation.

The camera is described by an origin, a view direction and a field-of-view
factor. From these it derives two image-plane basis vectors once per trace:

- cx: horizontal, (width * fov / height, 0, 0)
- cy: vertical, normalize(cross(cx, direction)) * fov

A primary ray for image coordinates (x, y) points along
cx * (x / width - 0.5) + cy * (y / height - 0.5) + direction, so y = 0 is the
bottom of the view. The ray origin is pushed forward along that direction by
CAMERA_PUSH units so rays start inside the scene box.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> camera = PinholeCamera(
    ...     origin=(50.0, 52.0, 295.6),
    ...     direction=(0.0, -0.042612, -1.0),
    ...     fov=0.5135,
    ... )
    >>> setup_camera(camera, 1024, 768)
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.smallpt.core.ray import Ray, make_ray, normalize, tent_sample

# Distance primary rays are pushed forward from the camera origin
CAMERA_PUSH = 138.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        direction: View direction (x, y, z). Normalized by setup_camera.
        fov: Field-of-view factor scaling both image-plane basis vectors.
    """

    origin: tuple[float, float, float]
    direction: tuple[float, float, float]
    fov: float = 0.5135


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_cx = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_cy = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per trace)
# =============================================================================


def setup_camera(camera: PinholeCamera, width: int, height: int) -> None:
    """Derive the camera basis for an image size and store it.

    Args:
        camera: Camera configuration.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the image size or field of view is not positive, or
            the view direction is the zero vector.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if camera.fov <= 0.0:
        raise ValueError(f"Field of view must be positive, got {camera.fov}")

    direction = np.array(camera.direction, dtype=np.float64)
    norm = np.linalg.norm(direction)
    if norm == 0.0:
        raise ValueError("Camera direction must not be the zero vector")
    direction = direction / norm

    cx = np.array([width * camera.fov / height, 0.0, 0.0], dtype=np.float64)
    cy = np.cross(cx, direction)
    cy = cy / np.linalg.norm(cy) * camera.fov

    _camera_origin[None] = list(camera.origin)
    _camera_direction[None] = direction.tolist()
    _camera_cx[None] = cx.tolist()
    _camera_cy[None] = cy.tolist()
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    """Check whether setup_camera has been called."""
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f64, v: ti.f64) -> Ray:
    """Generate a primary ray through normalized image coordinates.

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A ray starting CAMERA_PUSH units in front of the camera, with a unit
        direction.
    """
    d = _camera_cx[None] * (u - 0.5) + _camera_cy[None] * (v - 0.5) + _camera_direction[None]
    return make_ray(_camera_origin[None] + d * CAMERA_PUSH, normalize(d))


@ti.func
def get_subpixel_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    sub_x: ti.i32,
    sub_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate a tent-jittered ray through one cell of a 2x2 sub-pixel grid.

    The jitter for each axis follows a triangular distribution of width two
    sub-pixels centred on the sub-pixel center, which overlaps neighbouring
    cells and acts as a tent reconstruction filter.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row in view space (0 = bottom).
        sub_x: Sub-pixel column, 0 or 1.
        sub_y: Sub-pixel row, 0 or 1.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A jittered primary ray.
    """
    dx = tent_sample()
    dy = tent_sample()
    u = (ti.cast(sub_x, ti.f64) + 0.5 + dx) / 2.0 + ti.cast(pixel_x, ti.f64)
    v = (ti.cast(sub_y, ti.f64) + 0.5 + dy) / 2.0 + ti.cast(pixel_y, ti.f64)
    return get_ray(u / ti.cast(width, ti.f64), v / ti.cast(height, ti.f64))


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, direction, cx and cy.
    """
    info = {}
    for name, value in (
        ("origin", _camera_origin[None]),
        ("direction", _camera_direction[None]),
        ("cx", _camera_cx[None]),
        ("cy", _camera_cy[None]),
    ):
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
