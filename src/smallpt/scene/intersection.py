"""Scene-level sphere storage and nearest-hit intersection.

The scene stores its spheres in Taichi fields (structure of arrays) so the
intersector can scan them inside kernels. Spheres are written once from
Python when the scene is built and are read-only while tracing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.scene.intersection import (
    ...     add_sphere, clear_scene, nearest_hit
    ... )
    >>> clear_scene()
    >>> add_sphere(16.5, (27.0, 16.5, 47.0), (0.0, 0.0, 0.0), (0.999, 0.999, 0.999), 1)
    >>> nearest_hit((27.0, 16.5, 100.0), (0.0, 0.0, -1.0))
    (36.5, 0)
"""

import taichi as ti

from src.smallpt.core.ray import vec3
from src.smallpt.geometry.sphere import NO_HIT, Sphere, hit_sphere

# Distance reported when nothing is hit
INFINITY = 1e20


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 otherwise.
        t: Distance along the ray to the nearest hit, INFINITY on a miss.
        sphere_id: Index of the sphere that was hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    sphere_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_emissions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_materials = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    radius: float,
    center: tuple[float, float, float],
    emission: tuple[float, float, float],
    color: tuple[float, float, float],
    material: int,
) -> int:
    """Append a sphere to the scene storage.

    No validation happens here; SceneManager validates before uploading.

    Args:
        radius: The radius of the sphere.
        center: The center of the sphere.
        emission: Radiance emitted uniformly in all directions.
        color: Per-channel albedo.
        material: Integer value of the sphere's MaterialKind.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_radii[idx] = radius
    sphere_centers[idx] = center
    sphere_emissions[idx] = emission
    sphere_colors[idx] = color
    sphere_materials[idx] = material
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load the geometry of sphere `index` from the scene fields."""
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest sphere hit by a ray.

    Scans every sphere in insertion order and keeps the smallest valid
    distance. A later sphere replaces the current best only when strictly
    closer, so the first of two equal distances wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record with
        t = INFINITY and sphere_id = -1.
    """
    closest_t = INFINITY
    closest_id = -1

    for i in range(num_spheres[None]):
        t = hit_sphere(ray_origin, ray_direction, get_sphere(i))
        if t != NO_HIT and t < closest_t:
            closest_t = t
            closest_id = i

    return SceneHitRecord(hit=ti.select(closest_id >= 0, 1, 0), t=closest_t, sphere_id=closest_id)


# =============================================================================
# Python-callable Queries
# =============================================================================

_query_t = ti.field(dtype=ti.f64, shape=())
_query_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _nearest_hit_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
    rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
    _query_t[None] = rec.t
    _query_id[None] = rec.sphere_id


def nearest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, int] | None:
    """Intersect a single ray with the scene from Python.

    Intended for tests and diagnostics; rendering calls intersect_scene
    inside kernels.

    Args:
        origin: The ray origin.
        direction: The ray direction (unit length).

    Returns:
        (distance, sphere_index) of the nearest hit, or None on a miss.
    """
    _nearest_hit_kernel(*origin, *direction)
    sphere_id = int(_query_id[None])
    if sphere_id < 0:
        return None
    return float(_query_t[None]), sphere_id
