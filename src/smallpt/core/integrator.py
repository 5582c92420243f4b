"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the per-frame sampling loop.

The estimator computes the recursive, unbiased estimate

    L(ray) = e + f * L(scattered ray)

where e is the emission of the nearest surface hit and f its albedo. Taichi
functions cannot recurse, so the recursion is unrolled into a loop that
carries the product of the albedos seen so far (the throughput) and adds
throughput * e at every hit. A dielectric hit in an early bounce evaluates
both its reflected and transmitted branches; the transmitted branch is pushed
on a small local stack and traced when the current path ends.

Key features:
    - Material dispatch (diffuse, specular, refractive)
    - Russian roulette on the maximum albedo channel after RUSSIAN_ROULETTE_DEPTH
    - Hard path length cap at MAX_DEPTH
    - Deterministic dielectric splitting up to SPLIT_DEPTH, importance-sampled
      branch selection beyond it
    - Additive accumulation into an injectable PixelGrid

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.core.framebuffer import PixelGrid
    >>> from src.smallpt.core.integrator import render_frame
    >>> from src.smallpt.scene.cornell_box import create_cornell_box_scene
    >>> from src.smallpt.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> setup_camera(camera, 64, 48)
    >>> grid = PixelGrid(64, 48)
    >>> render_frame(grid, samples=1)
"""

import taichi as ti
import taichi.math as tm

from src.smallpt.camera.pinhole import get_subpixel_ray, is_camera_initialized
from src.smallpt.core.framebuffer import PixelGrid
from src.smallpt.core.ray import (
    dot,
    max_component,
    normalize,
    reflect,
    refract,
    sample_cosine_hemisphere,
    schlick_fresnel,
    vec3,
)
from src.smallpt.scene.intersection import (
    intersect_scene,
    sphere_centers,
    sphere_colors,
    sphere_emissions,
    sphere_materials,
)
from src.smallpt.scene.manager import MaterialKind

# =============================================================================
# Rendering Constants
# =============================================================================

# Paths are cut off unconditionally past this depth
MAX_DEPTH = 32

# Russian roulette applies to bounces deeper than this
RUSSIAN_ROULETTE_DEPTH = 5

# Dielectric hits at this depth or shallower trace both branches
SPLIT_DEPTH = 2

# Pending transmitted branches; one per split level is enough
_STACK_SIZE = SPLIT_DEPTH + 2

# Refractive indices outside and inside refractive spheres
AIR_IOR = 1.0
GLASS_IOR = 1.5


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def radiance(
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
    rr_depth: ti.i32,
) -> vec3:
    """Estimate the radiance arriving along a ray.

    For every hit the estimator adds the surface emission weighted by the
    current throughput, then decides whether the path continues:

    1. A miss ends the path (the background is black).
    2. Past rr_depth the path survives with probability p = max(albedo) and
       the albedo of survivors is divided by p.
    3. Past max_depth the path ends.
    4. Otherwise the surface scatters the ray:
       - diffuse: cosine-weighted direction about the oriented normal
       - specular: mirror reflection
       - refractive: Snell refraction between AIR_IOR and GLASS_IOR with
         Schlick reflectance Re. Total internal reflection follows the
         mirror ray only. Up to SPLIT_DEPTH both branches are traced with
         weights Re and 1 - Re; deeper, one branch is picked with
         probability P = 0.25 + 0.5 Re and weighted Re / P or
         (1 - Re) / (1 - P).

    A path whose throughput drops to exactly zero stops, since nothing it
    could hit afterwards would contribute.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        depth: Recursion depth of the ray; 0 for camera rays.
        max_depth: Hard path length cap.
        rr_depth: Depth after which Russian roulette applies.

    Returns:
        The radiance estimate (RGB), never negative.
    """
    result = vec3(0.0, 0.0, 0.0)

    # Deferred transmitted branches, one per row
    stack_origin = ti.Matrix.zero(ti.f64, _STACK_SIZE, 3)
    stack_direction = ti.Matrix.zero(ti.f64, _STACK_SIZE, 3)
    stack_throughput = ti.Matrix.zero(ti.f64, _STACK_SIZE, 3)
    stack_depth = ti.Vector.zero(ti.i32, _STACK_SIZE)
    stack_size = 0

    origin = ray_origin
    direction = ray_direction
    throughput = vec3(1.0, 1.0, 1.0)
    bounce = depth
    active = 1

    while active == 1:
        path_done = 0
        rec = intersect_scene(origin, direction)

        if rec.hit == 0:
            path_done = 1
        else:
            i = rec.sphere_id
            x = origin + rec.t * direction
            n = normalize(x - sphere_centers[i])
            nl = n
            if dot(n, direction) >= 0.0:
                nl = -n
            f = sphere_colors[i]

            result += throughput * sphere_emissions[i]

            # Russian roulette
            p = max_component(f)
            if bounce > rr_depth:
                if ti.random(ti.f64) < p:
                    f = f / p
                else:
                    path_done = 1
            if bounce > max_depth:
                path_done = 1

            if path_done == 0:
                next_direction = vec3(0.0, 0.0, 0.0)
                weight = 1.0
                kind = sphere_materials[i]

                if kind == int(MaterialKind.DIFFUSE):
                    next_direction = sample_cosine_hemisphere(nl)

                elif kind == int(MaterialKind.SPECULAR):
                    next_direction = reflect(direction, n)

                else:
                    reflected = reflect(direction, n)
                    into = dot(n, nl) > 0.0
                    eta = ti.select(into, AIR_IOR / GLASS_IOR, GLASS_IOR / AIR_IOR)
                    transmitted, did_refract = refract(direction, nl, eta)

                    if did_refract == 0:
                        # Total internal reflection
                        next_direction = reflected
                    else:
                        cosine = ti.select(into, -dot(direction, nl), dot(transmitted, n))
                        re = schlick_fresnel(cosine, GLASS_IOR / AIR_IOR)
                        tr = 1.0 - re

                        if bounce > SPLIT_DEPTH:
                            prob = 0.25 + 0.5 * re
                            if ti.random(ti.f64) < prob:
                                next_direction = reflected
                                weight = re / prob
                            else:
                                next_direction = transmitted
                                weight = tr / (1.0 - prob)
                        else:
                            branch_throughput = throughput * f * tr
                            for s in ti.static(range(_STACK_SIZE)):
                                if s == stack_size:
                                    for c in ti.static(range(3)):
                                        stack_origin[s, c] = x[c]
                                        stack_direction[s, c] = transmitted[c]
                                        stack_throughput[s, c] = branch_throughput[c]
                                    stack_depth[s] = bounce + 1
                            stack_size += 1
                            next_direction = reflected
                            weight = re

                throughput = throughput * f * weight
                origin = x
                direction = next_direction
                bounce += 1

                if max_component(throughput) <= 0.0:
                    path_done = 1

        if path_done == 1:
            if stack_size > 0:
                stack_size -= 1
                for s in ti.static(range(_STACK_SIZE)):
                    if s == stack_size:
                        origin = vec3(stack_origin[s, 0], stack_origin[s, 1], stack_origin[s, 2])
                        direction = vec3(
                            stack_direction[s, 0], stack_direction[s, 1], stack_direction[s, 2]
                        )
                        throughput = vec3(
                            stack_throughput[s, 0], stack_throughput[s, 1], stack_throughput[s, 2]
                        )
                        bounce = stack_depth[s]
            else:
                active = 0

    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    grid: ti.template(),
    width: ti.i32,
    height: ti.i32,
    row_start: ti.i32,
    row_stop: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    rr_depth: ti.i32,
    clamp_subpixels: ti.i32,
):
    """Trace rows [row_start, row_stop) of one frame and add them into grid.

    Rows are numbered in view space (0 = bottom of the view) and written to
    grid row height - 1 - y.
    """
    for y, x in ti.ndrange((row_start, row_stop), width):
        pixel = vec3(0.0, 0.0, 0.0)
        for sy in range(2):
            for sx in range(2):
                r = vec3(0.0, 0.0, 0.0)
                for _ in range(samples):
                    ray = get_subpixel_ray(x, y, sx, sy, width, height)
                    r += radiance(ray.origin, ray.direction, 0, max_depth, rr_depth)
                r = r * (1.0 / samples)
                if clamp_subpixels == 1:
                    r = tm.clamp(r, 0.0, 1.0)
                pixel += r * 0.25
        grid[x, height - 1 - y] += pixel


_radiance_sum = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _accumulate_radiance(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    depth: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
    rr_depth: ti.i32,
):
    for _ in range(num_samples):
        _radiance_sum[None] += radiance(
            vec3(ox, oy, oz), vec3(dx, dy, dz), depth, max_depth, rr_depth
        )


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_path_limits(max_depth: int, rr_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if rr_depth < 0:
        raise ValueError(f"rr_depth must be non-negative, got {rr_depth}")


def estimate_radiance(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    num_samples: int = 1,
    *,
    max_depth: int = MAX_DEPTH,
    rr_depth: int = RUSSIAN_ROULETTE_DEPTH,
) -> tuple[float, float, float]:
    """Average num_samples independent radiance estimates for one ray.

    This is a Python-callable entry point for tests and diagnostics. The
    samples run in parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction. Must be unit length and non-zero.
        depth: Recursion depth to start at.
        num_samples: Number of independent estimates to average.
        max_depth: Hard path length cap.
        rr_depth: Depth after which Russian roulette applies.

    Returns:
        Tuple of (R, G, B) mean radiance.

    Raises:
        ValueError: If num_samples is not positive, or depth or a depth limit
            is negative.
    """
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")
    _check_path_limits(max_depth, rr_depth)

    _radiance_sum[None] = [0.0, 0.0, 0.0]
    _accumulate_radiance(*origin, *direction, depth, num_samples, max_depth, rr_depth)
    total = _radiance_sum[None]
    return (
        float(total[0]) / num_samples,
        float(total[1]) / num_samples,
        float(total[2]) / num_samples,
    )


def render_frame(
    grid: PixelGrid,
    samples: int = 1,
    *,
    max_depth: int = MAX_DEPTH,
    rr_depth: int = RUSSIAN_ROULETTE_DEPTH,
    clamp_subpixels: bool = True,
    row_range: tuple[int, int] | None = None,
) -> None:
    """Trace one frame (or a band of its rows) and add it into grid.

    Every pixel gets a 2x2 grid of sub-pixels with `samples` tent-jittered
    rays each. The mean of each sub-pixel, clamped to [0, 1] when
    clamp_subpixels is set, is added into the pixel with weight 0.25.
    Existing grid contents are kept, so repeated calls accumulate.

    The camera must have been set up for the grid's dimensions.

    Args:
        grid: The accumulator to add into.
        samples: Samples per sub-pixel.
        max_depth: Hard path length cap.
        rr_depth: Depth after which Russian roulette applies.
        clamp_subpixels: Clamp each sub-pixel mean to [0, 1] before adding.
        row_range: Optional (start, stop) band of view-space rows to trace,
            0 being the bottom row of the view. Default is all rows.

    Raises:
        RuntimeError: If the camera has not been set up.
        ValueError: If samples is not positive, a depth limit is negative or
            row_range is outside the grid.
    """
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples}")
    _check_path_limits(max_depth, rr_depth)

    row_start, row_stop = row_range if row_range is not None else (0, grid.height)
    if not 0 <= row_start <= row_stop <= grid.height:
        raise ValueError(f"Row range ({row_start}, {row_stop}) outside 0..{grid.height}")
    if row_start == row_stop:
        return

    _render_rows(
        grid.field,
        grid.width,
        grid.height,
        row_start,
        row_stop,
        samples,
        max_depth,
        rr_depth,
        int(clamp_subpixels),
    )
