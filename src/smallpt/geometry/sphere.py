"""Sphere primitive with analytic ray-sphere intersection.

The intersection substitutes the ray parametrisation o + t d into the implicit
sphere equation |x - c|^2 = r^2. With a unit-length direction the quadratic
reduces to

    t^2 - 2 t (op . d) + op . op - r^2 = 0,   op = c - o

whose roots are b -/+ sqrt(det) with b = op . d and det = b^2 - op . op + r^2.
The near root is preferred; the far root is the fallback used when the origin
lies inside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(50.0, 16.5, 47.0), radius=16.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from src.smallpt.core.ray import dot, vec3

# Roots closer than this are ignored to avoid self-intersection
SPHERE_EPSILON = 1e-4

# Distance returned when the ray misses
NO_HIT = 0.0


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> ti.f64:
    """Return the nearest intersection distance beyond SPHERE_EPSILON.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        sphere: The sphere to test intersection against.

    Returns:
        The smaller root exceeding SPHERE_EPSILON, else the larger one, else
        NO_HIT when neither qualifies or the discriminant is negative.
    """
    op = sphere.center - ray_origin
    b = dot(op, ray_direction)
    det = b * b - dot(op, op) + sphere.radius * sphere.radius

    result = NO_HIT
    if det >= 0.0:
        sqrt_det = ti.sqrt(det)
        t = b - sqrt_det
        if t > SPHERE_EPSILON:
            result = t
        else:
            t = b + sqrt_det
            if t > SPHERE_EPSILON:
                result = t
    return result
