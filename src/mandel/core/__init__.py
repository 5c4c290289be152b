"""Core rendering module.

This module contains the building blocks of a supersampled render:

Components:
    sampler: Halton(2,3) subpixel sample positions
    filter: Mitchell-Netravali weights and precomputed sample tables
    fractal: Escape-time and shading kernels (numba, GIL-free)
    compositor: Per-pixel filtering and tile rasterization
    config: Plane window and validated render configuration
    scheduler: Tile grid and the thread-pooled batch scheduler
    renderer: Top-level render call owning the pixel buffer

Every tile writes only to its own pixels, so worker threads share the
pixel buffer without locks.
"""

from .config import RenderConfig, Shading, Window
from .filter import SampleTable, build_sample_table, mitchell, mitchell_weight
from .fractal import mandel, shade, shade_gradient, shade_grayscale
from .renderer import MandelbrotRenderer
from .sampler import halton, halton23, subpixel_offsets
from .scheduler import RenderCancelledError, TileGrid, TileScheduler, tile_order

__all__ = [
    "MandelbrotRenderer",
    "RenderCancelledError",
    "RenderConfig",
    "SampleTable",
    "Shading",
    "TileGrid",
    "TileScheduler",
    "Window",
    "build_sample_table",
    "halton",
    "halton23",
    "mandel",
    "mitchell",
    "mitchell_weight",
    "shade",
    "shade_gradient",
    "shade_grayscale",
    "subpixel_offsets",
    "tile_order",
]
