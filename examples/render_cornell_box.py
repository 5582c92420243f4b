#!/usr/bin/env python3
"""Render the Cornell box scene.

This script renders the nine-sphere Cornell box with the path tracer and
saves the averaged result as a PNG.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH       Image width in pixels (default: 1024)
    --height HEIGHT     Image height in pixels (default: 768)
    --samples SAMPLES   Samples per sub-pixel per frame (default: 1)
    --frames FRAMES     Number of frames to accumulate (default: 1)
    --output OUTPUT     Output file path (default: image.png)
    --gamma POLICY      Display mapping, linear or gamma (default: linear)
    --seed SEED         Random seed
    --arch ARCH         Taichi backend (default: cpu)
    --threads N         CPU worker threads
    --verbose           Enable debug logging
    --quiet             Suppress progress output

Example:
    python -m examples.render_cornell_box --width 256 --height 192 --samples 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from src.smallpt.config import ARCHITECTURES, RenderSettings, init_taichi
from src.smallpt.preview.display import GAMMA_POLICIES


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1024,
        help="Image width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=768,
        help="Image height in pixels (default: 768)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=1,
        help="Samples per sub-pixel per frame (default: 1)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=1,
        help="Number of frames to accumulate (default: 1)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.png",
        help="Output file path (default: image.png)",
    )
    parser.add_argument(
        "--gamma",
        choices=GAMMA_POLICIES,
        default="linear",
        help="Display mapping (default: linear)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: Taichi's)",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHITECTURES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU worker threads; 1 with --seed gives reproducible output",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Rows traced per progress update (default: 16)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_cornell_box(
    settings: RenderSettings,
    num_frames: int = 1,
    output_path: str = "image.png",
    gamma_policy: str = "linear",
    rows_per_batch: int = 16,
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Taichi must already be initialised.

    Args:
        settings: Image size and sampling settings.
        num_frames: Number of frames to accumulate.
        output_path: Output file path (PNG).
        gamma_policy: "linear" or "gamma" display mapping.
        rows_per_batch: Rows to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi fields are created after initialization
    from src.smallpt.core.progressive import ProgressiveRenderer
    from src.smallpt.scene.cornell_box import create_cornell_box_scene

    if not quiet:
        print(f"Creating Cornell box scene ({settings.width}x{settings.height})...")

    scene, camera = create_cornell_box_scene(settings.fov)
    renderer = ProgressiveRenderer(settings, camera)

    if not quiet:
        print(
            f"Rendering {num_frames} frame(s) at "
            f"{settings.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = 100.0 * rows_done / total_rows if total_rows > 0 else 0.0
            print(f"\r  Progress: {progress_pct:5.1f}%", end="", flush=True)

    renderer.render(
        num_frames=num_frames,
        rows_per_batch=rows_per_batch,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(str(output_file), gamma_policy=gamma_policy)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.frames <= 0:
            raise ValueError(f"--frames must be positive, got {args.frames}")
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples=args.samples,
            seed=args.seed,
            arch=args.arch,
            threads=args.threads,
        )
        init_taichi(settings)
        if not args.quiet:
            print(f"Using {settings.arch} backend")

        render_cornell_box(
            settings,
            num_frames=args.frames,
            output_path=args.output,
            gamma_policy=args.gamma,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
