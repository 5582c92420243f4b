"""Ray data structure and double-precision vector utilities.

This module provides the Ray dataclass and the vector helpers used by every
other part of the tracer. All helpers are Taichi functions so they can be
called from kernels; vectors are 3-component float64 Taichi vectors because
the scene walls are spheres of radius 1e5 and the intersection test loses all
precision in float32.

Taichi's vector type already supplies addition, subtraction, per-component and
scalar multiplication/division and negation; the helpers below cover the rest.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(50.0, 52.0, 295.6)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
"""

import taichi as ti
import taichi.math as tm

# 3D vector of doubles, used for positions, directions and RGB colors alike
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Unit length is a
            caller contract and is not enforced.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length (magnitude) of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Precondition: v must not be the zero vector. Normalizing a zero vector
    divides by zero and yields non-finite components; this is not checked.

    Args:
        v: The input vector.

    Returns:
        v divided by its length.
    """
    return v / length(v)


@ti.func
def max_component(v: vec3) -> ti.f64:
    """Return the largest of the three components of v."""
    return ti.max(v.x, ti.max(v.y, v.z))


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes d - 2 (n . d) n. The normal may face either side of the surface;
    the result is the same.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * dot(normal, incident) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f64):
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident ray
            (dot(incident, normal) <= 0).
        eta: The ratio of refractive indices n_incident / n_transmitted.

    Returns:
        A tuple (refracted, did_refract). did_refract is 0 on total internal
        reflection, in which case refracted is the zero vector.
    """
    cos_i = -dot(incident, normal)
    cos2_t = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    refracted = vec3(0.0, 0.0, 0.0)
    did_refract = 0
    if cos2_t > 0.0:
        refracted = normalize(eta * incident + (eta * cos_i - ti.sqrt(cos2_t)) * normal)
        did_refract = 1
    return refracted, did_refract


@ti.func
def schlick_fresnel(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Compute Fresnel reflectance using Schlick's approximation.

    R0 = ((1 - ref_idx) / (1 + ref_idx))^2, which equals
    ((nt - nc) / (nt + nc))^2 for ref_idx = nt / nc.

    Args:
        cosine: Cosine of the angle on the less dense side of the interface.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    c = 1.0 - cosine
    return r0 + (1.0 - r0) * c * c * c * c * c


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis (u, v, w) with w equal to the normal.

    The seed vector for the first cross product is the vertical axis when
    the normal has a noticeable x component and the horizontal axis
    otherwise, so the seed is never close to parallel with the normal.

    Args:
        normal: The surface normal (should be normalized).

    Returns:
        A tuple (tangent, bitangent, normal) forming an orthonormal basis.
    """
    seed = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.1:
        seed = vec3(0.0, 1.0, 0.0)
    tangent = normalize(cross(seed, normal))
    bitangent = cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def sample_cosine_hemisphere(normal: vec3) -> vec3:
    """Cosine-weighted hemisphere sampling about a normal.

    Draws r1 for the azimuth in [0, 2 pi) and r2 for the radius term, which
    gives directions with density cos(theta) / pi.

    Args:
        normal: The axis of the hemisphere (should be normalized).

    Returns:
        The sampled unit direction in world space.
    """
    r1 = 2.0 * tm.pi * ti.random(ti.f64)
    r2 = ti.random(ti.f64)
    r2s = ti.sqrt(r2)
    u, v, w = build_onb_from_normal(normal)
    return normalize(u * ti.cos(r1) * r2s + v * ti.sin(r1) * r2s + w * ti.sqrt(1.0 - r2))


@ti.func
def tent_sample() -> ti.f64:
    """Draw an offset in [-1, 1) from a triangular (tent) distribution.

    A uniform draw r in [0, 2) is pushed through the inverse CDF of the tent
    filter centred on zero.
    """
    r = 2.0 * ti.random(ti.f64)
    offset = 0.0
    if r < 1.0:
        offset = ti.sqrt(r) - 1.0
    else:
        offset = 1.0 - ti.sqrt(2.0 - r)
    return offset
