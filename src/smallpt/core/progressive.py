"""Progressive renderer for frame-by-frame sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering any number of frames into one accumulator
- Progress callbacks per band of rows, for command line progress output
- A generator interface for the same progress stream
- Reset and export of the accumulated image

The ProgressiveRenderer owns its PixelGrid and sets up the camera for its
image size, so a render needs only settings and a camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.smallpt.config import RenderSettings
    >>> from src.smallpt.core.progressive import ProgressiveRenderer
    >>> from src.smallpt.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(RenderSettings(width=64, height=48), camera)
    >>> renderer.render(num_frames=2)
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.smallpt.camera.pinhole import PinholeCamera, setup_camera
from src.smallpt.config import RenderSettings
from src.smallpt.core.framebuffer import PixelGrid
from src.smallpt.core.integrator import render_frame
from src.smallpt.preview.display import GammaPolicy
from src.smallpt.preview.export import image_to_rgba8, save_png

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows) across the whole render call
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A renderer that accumulates whole frames into its own pixel grid.

    Each frame traces every pixel once with 4 * settings.samples rays and
    adds the result into the grid. The grid therefore holds the sum of all
    frames rendered since the last reset.

    Attributes:
        settings: The render settings.
        camera: The camera, set up for settings.width x settings.height.
        grid: The accumulator.
    """

    def __init__(self, settings: RenderSettings, camera: PinholeCamera) -> None:
        """Initialize the renderer.

        Args:
            settings: Image size, sampling and path length settings.
            camera: The camera to trace through.

        Raises:
            ValueError: If the camera configuration is invalid.
        """
        self.settings = settings
        self.camera = camera
        setup_camera(camera, settings.width, settings.height)
        self.grid = PixelGrid(settings.width, settings.height)
        self._frame_count = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def frame_count(self) -> int:
        """Get the number of frames accumulated since the last reset."""
        return self._frame_count

    def reset(self) -> None:
        """Clear the accumulator and the frame counter."""
        self.grid.clear()
        self._frame_count = 0

    def render_progressive(
        self,
        num_frames: int = 1,
        rows_per_batch: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render frames, yielding progress after each band of rows.

        Rows are traced from the bottom of the view upwards, the same order
        as the final image is filled from its last row.

        Args:
            num_frames: Number of frames to add.
            rows_per_batch: Rows traced per kernel launch. Default is the
                whole frame at once.

        Yields:
            Tuple of (rows_done, total_rows), counted over all frames of
            this call.

        Raises:
            ValueError: If rows_per_batch is not positive.
        """
        if num_frames <= 0:
            return
        height = self.height
        band = rows_per_batch if rows_per_batch is not None else height
        if band <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {band}")

        total_rows = num_frames * height
        rows_done = 0
        for _ in range(num_frames):
            start = time.perf_counter()
            # Camera fields are shared by all renderers
            setup_camera(self.camera, self.width, height)
            for row_start in range(0, height, band):
                row_stop = min(row_start + band, height)
                render_frame(
                    self.grid,
                    self.settings.samples,
                    max_depth=self.settings.max_depth,
                    rr_depth=self.settings.rr_depth,
                    clamp_subpixels=self.settings.clamp_subpixels,
                    row_range=(row_start, row_stop),
                )
                rows_done += row_stop - row_start
                yield (rows_done, total_rows)
            self._frame_count += 1
            logger.debug(
                "Frame %d done in %.3fs (%d spp)",
                self._frame_count,
                time.perf_counter() - start,
                self.settings.samples_per_pixel,
            )

    def render(
        self,
        num_frames: int = 1,
        rows_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render frames with an optional progress callback.

        Args:
            num_frames: Number of frames to add.
            rows_per_batch: Rows traced before each callback.
            callback: Optional callback receiving (rows_done, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {100 * done // total}%")
            >>> renderer.render(1, rows_per_batch=8, callback=progress)
        """
        for rows_done, total_rows in self.render_progressive(num_frames, rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)

    def get_image_numpy(self, average: bool = True) -> npt.NDArray[np.float64]:
        """Get the accumulated image as a NumPy array.

        Args:
            average: Divide by the frame count, giving the mean frame instead
                of the sum. Has no effect before the first frame.

        Returns:
            NumPy array of shape (height, width, 3), row 0 at the top.
        """
        image = self.grid.to_numpy()
        if average and self._frame_count > 0:
            image /= self._frame_count
        return image

    def get_image_rgba8(self, gamma_policy: GammaPolicy = "linear") -> npt.NDArray[np.uint8]:
        """Get the averaged image packed as interleaved RGBA8.

        Args:
            gamma_policy: "linear" or "gamma" display mapping.

        Returns:
            Array of shape (height, width, 4), alpha 255.
        """
        return image_to_rgba8(self.get_image_numpy(), gamma_policy=gamma_policy)

    def save_image(self, filepath: str, gamma_policy: GammaPolicy = "linear") -> None:
        """Save the averaged image to a file.

        Args:
            filepath: Path to save the image (e.g., "image.png").
            gamma_policy: "linear" or "gamma" display mapping.
        """
        save_png(self.get_image_numpy(), filepath, gamma_policy=gamma_policy)
        logger.info("Saved %dx%d image to %s", self.width, self.height, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
