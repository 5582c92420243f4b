"""Camera module for view and primary ray generation.

Components:
    pinhole: Pinhole camera with a field-of-view factor and tent-filtered
        2x2 sub-pixel sampling

Camera responsibilities:
    - Derive the image-plane basis once per trace
    - Map (pixel, sub-pixel) coordinates to world-space rays
    - Apply tent-filter jitter for anti-aliasing
    - Push primary rays forward into the scene interior

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    CAMERA_PUSH,
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_subpixel_ray,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "CAMERA_PUSH",
    "setup_camera",
    "is_camera_initialized",
    "get_ray",
    "get_subpixel_ray",
    "get_camera_info",
]
