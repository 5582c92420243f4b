"""Pixel accumulator grid.

A PixelGrid is the buffer the sampling loop adds radiance into. It is created
by its owner and handed to the render kernels explicitly, so several grids can
coexist and nothing in the tracer holds a global image.

Lifecycle: allocate -> accumulate N frames -> export (read-only) -> discard.

Rows are stored top-down: grid[x, 0] is the top-left pixel of the final
image, which is also row 0 of to_numpy().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.core.framebuffer import PixelGrid
    >>> grid = PixelGrid(64, 48)
    >>> grid.to_numpy().shape
    (48, 64, 3)
"""

from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti


class PixelGrid:
    """A width x height grid of float64 RGB accumulators.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        field: The underlying Taichi vector field, indexed [x, row].
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a zero-filled grid.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self.field: Any = ti.Vector.field(3, dtype=ti.f64, shape=(width, height))
        self.clear()

    @property
    def width(self) -> int:
        """Get the grid width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the grid height."""
        return self._height

    def clear(self) -> None:
        """Reset every accumulator to zero."""
        self.field.fill(0.0)

    def fill(self, value: float) -> None:
        """Set every channel of every accumulator to value."""
        self.field.fill(value)

    def __getitem__(self, key: tuple[int, int]) -> tuple[float, float, float]:
        """Read the accumulator at (x, row)."""
        v = self.field[key]
        return (float(v[0]), float(v[1]), float(v[2]))

    def __setitem__(self, key: tuple[int, int], value: tuple[float, float, float]) -> None:
        """Overwrite the accumulator at (x, row)."""
        self.field[key] = list(value)

    def add(self, x: int, row: int, value: tuple[float, float, float]) -> None:
        """Add value into the accumulator at (x, row)."""
        current = self[x, row]
        self[x, row] = (current[0] + value[0], current[1] + value[1], current[2] + value[2])

    def total(self) -> tuple[float, float, float]:
        """Sum of all accumulators per channel."""
        sums = self.to_numpy().sum(axis=(0, 1))
        return (float(sums[0]), float(sums[1]), float(sums[2]))

    def to_numpy(self) -> npt.NDArray[np.float64]:
        """Export the grid as a (height, width, 3) array, row 0 at the top.

        The returned array is a copy; writing to it does not affect the grid.
        """
        # Transpose from (width, height, 3) to (height, width, 3)
        return np.ascontiguousarray(np.transpose(self.field.to_numpy(), (1, 0, 2)))

    def __repr__(self) -> str:
        """Return a string representation of the grid."""
        return f"PixelGrid(width={self.width}, height={self.height})"
