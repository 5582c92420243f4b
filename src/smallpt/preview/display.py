"""Display policy for mapping accumulated radiance to 8-bit channel values.

Two policies are supported:

    - "linear": clamp to [0, 1] and scale to [0, 255], truncating. This is
      the mapping the rendered images have always been displayed with.
    - "gamma": clamp to [0, 1], encode with gamma 2.2 and round to the
      nearest integer in [0, 255].

Example:
    >>> import numpy as np
    >>> from src.smallpt.preview.display import process_image_for_display
    >>> process_image_for_display(np.full((1, 1, 3), 0.5), "gamma")[0, 0]
    array([186, 186, 186], dtype=uint8)
"""

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for display mapping options
GammaPolicy = Literal["linear", "gamma"]

GAMMA_POLICIES: tuple[str, ...] = ("linear", "gamma")

# Display gamma of the "gamma" policy
DISPLAY_GAMMA = 2.2


def clamp(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Clamp every value to [0, 1]."""
    return np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma encoding for display.

    Args:
        image: Linear image array in [0, 1] range.
        gamma: Gamma value (default 2.2).

    Returns:
        Gamma encoded image.
    """
    if gamma == 1.0:
        return np.asarray(image, dtype=np.float64)

    # Clamp first; negative values have no real power
    return np.power(clamp(image), 1.0 / gamma)


def to_int(
    image: npt.NDArray[np.floating],
    gamma_policy: GammaPolicy = "linear",
) -> npt.NDArray[np.uint8]:
    """Map linear radiance values to 8-bit integers.

    Args:
        image: Array of linear values of any shape.
        gamma_policy: "linear" (clamp, scale, truncate) or "gamma" (clamp,
            gamma 2.2, scale, round).

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If gamma_policy is unknown.
    """
    if gamma_policy == "linear":
        scaled = clamp(image) * 255.0
    elif gamma_policy == "gamma":
        scaled = apply_gamma(image, DISPLAY_GAMMA) * 255.0 + 0.5
    else:
        raise ValueError(f"Unknown gamma policy: {gamma_policy}")
    return np.floor(scaled).astype(np.uint8)


def process_image_for_display(
    image: npt.NDArray[np.floating],
    gamma_policy: GammaPolicy = "linear",
) -> npt.NDArray[np.uint8]:
    """Process an (H, W, 3) radiance image for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma_policy: "linear" or "gamma".

    Returns:
        8-bit RGB image of shape (H, W, 3).

    Raises:
        ValueError: If the image is not (H, W, 3) or gamma_policy is unknown.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    return to_int(image, gamma_policy)
