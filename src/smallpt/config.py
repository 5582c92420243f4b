"""Render settings and Taichi runtime initialisation.

Example:
    >>> from src.smallpt.config import RenderSettings, init_taichi
    >>> settings = RenderSettings(width=256, height=192, samples=4, seed=7)
    >>> init_taichi(settings)
"""

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Backends accepted by RenderSettings.arch
ARCHITECTURES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass
class RenderSettings:
    """Parameters of one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Samples per sub-pixel per frame (each pixel gets 4x this).
        fov: Field-of-view factor of the camera.
        max_depth: Hard path length cap.
        rr_depth: Depth after which Russian roulette applies.
        seed: Random seed for Taichi, or None for Taichi's default.
        arch: Taichi backend name, one of ARCHITECTURES.
        threads: CPU worker threads, or None for all cores. Use 1 together
            with a seed for bit-exact reproducible renders.
        clamp_subpixels: Clamp each sub-pixel mean to [0, 1] before it is
            added into the pixel.
    """

    width: int = 1024
    height: int = 768
    samples: int = 1
    fov: float = 0.5135
    max_depth: int = 32
    rr_depth: int = 5
    seed: int | None = None
    arch: str = "cpu"
    threads: int | None = None
    clamp_subpixels: bool = True

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.samples <= 0:
            raise ValueError(f"samples must be positive, got {self.samples}")
        if self.fov <= 0.0:
            raise ValueError(f"fov must be positive, got {self.fov}")
        if self.max_depth < 0 or self.rr_depth < 0:
            raise ValueError(
                f"Depth limits must be non-negative, got max_depth={self.max_depth}, "
                f"rr_depth={self.rr_depth}"
            )
        if self.arch not in ARCHITECTURES:
            raise ValueError(f"Unknown arch {self.arch!r}, expected one of {sorted(ARCHITECTURES)}")
        if self.threads is not None and self.threads <= 0:
            raise ValueError(f"threads must be positive, got {self.threads}")

    @property
    def samples_per_pixel(self) -> int:
        """Camera rays traced per pixel in one frame."""
        return 4 * self.samples


def init_taichi(settings: RenderSettings) -> None:
    """Initialise the Taichi runtime for a render.

    Must run before any module that allocates Taichi fields is imported.
    Floating point defaults to float64.

    Args:
        settings: The render settings providing arch, seed and threads.
    """
    kwargs = {"arch": ARCHITECTURES[settings.arch], "default_fp": ti.f64}
    if settings.seed is not None:
        kwargs["random_seed"] = settings.seed
    if settings.threads is not None:
        kwargs["cpu_max_num_threads"] = settings.threads
    logger.debug("Initialising Taichi with %s", kwargs)
    ti.init(**kwargs)
