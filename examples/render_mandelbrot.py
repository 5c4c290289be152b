#!/usr/bin/env python3
"""Render a supersampled Mandelbrot image.

This script builds a render configuration from the command line, renders
it on a pool of worker threads and writes the result as a PPM (P3) or,
for any other suffix, through Pillow.

Usage:
    python -m examples.render_mandelbrot [options]

Options:
    --width WIDTH             Image width in pixels (default: 675)
    --height HEIGHT           Image height in pixels (default: 250)
    --tile-width W            Tile width in pixels (default: 16)
    --tile-height H           Tile height in pixels (default: 16)
    --samples SAMPLES         Samples per pixel (default: 1024)
    --filter-size SIZE        Filter support width in pixels (default: 2.0)
    --iterations N            Escape-time iteration cap (default: 256)
    --window X Y W H          Plane window as origin and extent
    --window-corners X0 X1 Y0 Y1
                              Plane window as two corner pairs
    --threads N               Worker threads (default: 6)
    --tiles-per-batch N       Tiles per worker dispatch (default: 27)
    --shading MODE            "gradient" or "grayscale" (default: gradient)
    --seed SEED               Seed for the tile shuffle
    --no-shuffle              Dispatch tiles in row-major order
    --output OUTPUT           Output file path (default: mandel.ppm)
    --dump-sampling DIR       Also write sampler/filter diagnostic tables
    --verbose                 Log scheduler activity
    --quiet                   Suppress progress output

Example:
    python -m examples.render_mandelbrot --width 320 --height 200 --samples 64
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from src.mandel.core.config import (
    DEFAULT_HEIGHT,
    DEFAULT_ITERATIONS,
    DEFAULT_SAMPLES,
    DEFAULT_THREADS,
    DEFAULT_TILE_SIZE,
    DEFAULT_TILES_PER_BATCH,
    DEFAULT_WIDTH,
    DEFAULT_WINDOW,
)
from src.mandel.core.filter import DEFAULT_FILTER_SIZE


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Render a supersampled Mandelbrot image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--tile-width",
        type=int,
        default=DEFAULT_TILE_SIZE,
        help=f"Tile width in pixels (default: {DEFAULT_TILE_SIZE})",
    )
    parser.add_argument(
        "--tile-height",
        type=int,
        default=DEFAULT_TILE_SIZE,
        help=f"Tile height in pixels (default: {DEFAULT_TILE_SIZE})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "--filter-size",
        type=float,
        default=DEFAULT_FILTER_SIZE,
        help=f"Filter support width in pixels (default: {DEFAULT_FILTER_SIZE})",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"Escape-time iteration cap (default: {DEFAULT_ITERATIONS})",
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument(
        "--window",
        type=float,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        help="Plane window as origin and extent",
    )
    window.add_argument(
        "--window-corners",
        type=float,
        nargs=4,
        metavar=("X0", "X1", "Y0", "Y1"),
        help="Plane window as two corner pairs",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_THREADS,
        help=f"Worker threads (default: {DEFAULT_THREADS})",
    )
    parser.add_argument(
        "--tiles-per-batch",
        type=int,
        default=DEFAULT_TILES_PER_BATCH,
        help=f"Tiles per worker dispatch (default: {DEFAULT_TILES_PER_BATCH})",
    )
    parser.add_argument(
        "--shading",
        choices=("gradient", "grayscale"),
        default="gradient",
        help="Color mapping (default: gradient)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the tile shuffle",
    )
    parser.add_argument(
        "--no-shuffle",
        action="store_true",
        help="Dispatch tiles in row-major order",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="mandel.ppm",
        help="Output file path (default: mandel.ppm)",
    )
    parser.add_argument(
        "--dump-sampling",
        type=str,
        default=None,
        metavar="DIR",
        help="Also write sampler/filter diagnostic tables to DIR",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduler activity",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser


def render_mandelbrot(args: argparse.Namespace) -> Path:
    """Render an image for parsed command-line arguments and save it.

    Returns:
        Path to the saved image file.
    """
    from src.mandel.core.config import RenderConfig, Window
    from src.mandel.core.renderer import MandelbrotRenderer
    from src.mandel.preview.diagnostics import write_sampling_data

    quiet = args.quiet

    if args.window is not None:
        window = Window(*args.window)
    elif args.window_corners is not None:
        window = Window.from_corners(*args.window_corners)
    else:
        window = DEFAULT_WINDOW

    config = RenderConfig.create(
        args.width,
        args.height,
        window,
        sample_count=args.samples,
        filter_size=args.filter_size,
        iterations=args.iterations,
        tile_width=args.tile_width,
        tile_height=args.tile_height,
        num_threads=args.threads,
        tiles_per_batch=args.tiles_per_batch,
        shading=args.shading,
    )

    if args.dump_sampling is not None:
        for path in write_sampling_data(args.dump_sampling, size=args.filter_size):
            if not quiet:
                print(f"Wrote {path}")

    if not quiet:
        print(f"Running on {config.num_threads} threads.")
        print(
            f"Rendering {config.width}x{config.height} with "
            f"{config.samples.count} samples per pixel..."
        )

    renderer = MandelbrotRenderer(config, seed=args.seed, shuffle=not args.no_shuffle)
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} tiles "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    renderer.save_image(str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(threadName)s %(name)s: %(message)s",
    )

    try:
        render_mandelbrot(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
