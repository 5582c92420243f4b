"""Preview module for image output.

Components:
    display: Linear and gamma display mappings to 8-bit values
    export: RGBA8 packing and PNG export

Example:
    >>> from src.smallpt.preview import save_png
    >>> save_png(renderer, "image.png", gamma_policy="gamma")
"""

from src.smallpt.preview.display import (
    DISPLAY_GAMMA,
    GAMMA_POLICIES,
    GammaPolicy,
    apply_gamma,
    clamp,
    process_image_for_display,
    to_int,
)
from src.smallpt.preview.export import (
    image_to_rgba8,
    save_png,
)

__all__ = [
    # Display mapping
    "GammaPolicy",
    "GAMMA_POLICIES",
    "DISPLAY_GAMMA",
    "clamp",
    "apply_gamma",
    "to_int",
    "process_image_for_display",
    # Export functions
    "image_to_rgba8",
    "save_png",
]
