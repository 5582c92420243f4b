"""Scene module for sphere storage and ray-scene queries.

This module handles scene representation and nearest-hit queries:

Components:
    intersection: Taichi field storage for spheres and the nearest-hit scan
    manager: Validated sphere records and the scene manager that uploads them
    cornell_box: The nine-sphere Cornell box and its camera

Scene data is organized as a Structure-of-Arrays in Taichi fields: one field
each for radii, centers, emissions, colors and material kinds, indexed by
sphere id.
"""

from .cornell_box import (
    CORNELL_BOX_SPHERES,
    create_cornell_box_camera,
    create_cornell_box_scene,
)
from .intersection import (
    INFINITY,
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    nearest_hit,
)
from .manager import (
    MaterialKind,
    SceneManager,
    SphereInfo,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "INFINITY",
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "nearest_hit",
    # Manager module
    "SceneManager",
    "MaterialKind",
    "SphereInfo",
    # Cornell box module
    "CORNELL_BOX_SPHERES",
    "create_cornell_box_camera",
    "create_cornell_box_scene",
]
