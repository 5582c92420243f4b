"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with analytic ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be called
from the scene intersector inside kernels. They follow the pattern:
    t = hit_shape(ray_origin, ray_direction, shape)  # NO_HIT on a miss
"""

from .sphere import NO_HIT, SPHERE_EPSILON, Sphere, hit_sphere

__all__ = [
    "Sphere",
    "hit_sphere",
    "NO_HIT",
    "SPHERE_EPSILON",
]
