"""Image export utilities for rendered images.

This module packs accumulated radiance into interleaved 8-bit RGBA (alpha
always 255) and writes it to image files.

Supported formats:
    - PNG (via Pillow)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.config import RenderSettings
    >>> from src.smallpt.core.progressive import ProgressiveRenderer
    >>> from src.smallpt.preview.export import save_png
    >>> from src.smallpt.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(RenderSettings(width=64, height=48), camera)
    >>> renderer.render(num_frames=4)
    >>> save_png(renderer, "image.png", gamma_policy="linear")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.smallpt.preview.display import GammaPolicy, process_image_for_display

if TYPE_CHECKING:
    from src.smallpt.core.progressive import ProgressiveRenderer


def image_to_rgba8(
    image: npt.NDArray[np.floating],
    *,
    gamma_policy: GammaPolicy = "linear",
) -> npt.NDArray[np.uint8]:
    """Convert a linear (H, W, 3) image to interleaved RGBA8.

    Args:
        image: Linear radiance image, row 0 at the top.
        gamma_policy: "linear" or "gamma" display mapping.

    Returns:
        Array of shape (H, W, 4) with dtype uint8 and alpha 255.
    """
    rgb = process_image_for_display(image, gamma_policy)
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def save_png(
    source: ProgressiveRenderer | npt.NDArray[np.floating],
    filepath: str,
    *,
    gamma_policy: GammaPolicy = "linear",
) -> None:
    """Save a rendered image as an RGBA PNG file.

    Args:
        source: A ProgressiveRenderer (its averaged image is saved) or a
            linear (H, W, 3) array.
        filepath: Output file path (should end in .png).
        gamma_policy: "linear" or "gamma" display mapping.

    Example:
        >>> save_png(renderer, "image.png", gamma_policy="gamma")
    """
    image = source if isinstance(source, np.ndarray) else source.get_image_numpy()
    pil_image = PILImage.fromarray(image_to_rgba8(image, gamma_policy=gamma_policy))
    pil_image.save(filepath)
