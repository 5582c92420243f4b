"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, float64 vector helpers and sampling utilities
    integrator: Recursive radiance estimator and the per-frame sampling loop
    framebuffer: Injectable pixel accumulator grid
    progressive: Frame-by-frame accumulation with progress reporting

The core module handles the rendering equation integration, implementing
Monte Carlo path tracing with Russian roulette termination, deterministic
dielectric splitting in early bounces and additive frame accumulation.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    build_onb_from_normal,
    cross,
    dot,
    length,
    make_ray,
    max_component,
    normalize,
    reflect,
    refract,
    sample_cosine_hemisphere,
    schlick_fresnel,
    tent_sample,
    vec3,
)

# Note: integrator, framebuffer and progressive are NOT imported here because
# they allocate Taichi fields, which must happen after ti.init().
#
# For progressive rendering, use:
#   from src.smallpt.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "max_component",
    "reflect",
    "refract",
    "schlick_fresnel",
    "build_onb_from_normal",
    "sample_cosine_hemisphere",
    "tent_sample",
]
