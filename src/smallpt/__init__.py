"""Taichi implementation of a small Monte Carlo path tracer.

This package renders a Cornell box built from nine spheres with unbiased
path tracing, with support for:
- Diffuse, mirror and glass surfaces
- Russian roulette path termination
- Tent-filtered 2x2 sub-pixel anti-aliasing
- Frame-by-frame accumulation into a pixel grid

Subpackages:
    core: Vector utilities, the radiance estimator and the rendering loop
    geometry: Sphere primitive and intersection
    scene: Sphere storage, scene manager and the Cornell box
    camera: Pinhole camera with ray generation
    preview: Display mapping and image export
"""

__version__ = "0.1.0"
