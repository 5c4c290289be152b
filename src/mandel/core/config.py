"""Render configuration: plane window and validated render parameters.

A ``RenderConfig`` is immutable for the lifetime of a render and is shared
by reference across every worker thread. All validation happens here, at
construction time, so the rendering kernels never see a configuration
that would divide by zero or produce NaNs.

Example:
    >>> from src.mandel.core.config import RenderConfig, Window
    >>> config = RenderConfig.create(
    ...     width=320, height=240, window=Window(-2.0, -1.0, 3.0, 2.0),
    ...     sample_count=16,
    ... )
    >>> config.samples.count
    16
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Literal

import numpy as np
import numpy.typing as npt

from src.mandel.core.filter import DEFAULT_FILTER_SIZE, SampleTable, build_sample_table
from src.mandel.core.fractal import SHADING_MODES

# Type alias for shading strategies
Shading = Literal["gradient", "grayscale"]

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_WIDTH = 675
DEFAULT_HEIGHT = 250
DEFAULT_TILE_SIZE = 16
DEFAULT_SAMPLES = 1024
DEFAULT_ITERATIONS = 256
DEFAULT_THREADS = 6
DEFAULT_TILES_PER_BATCH = 27


@dataclass(frozen=True)
class Window:
    """Visible rectangle of the complex plane.

    Attributes:
        x: Real coordinate of the origin corner.
        y: Imaginary coordinate of the origin corner.
        width: Extent along the real axis.
        height: Extent along the imaginary axis.
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "width", "height"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"Window {name} must be finite, got {getattr(self, name)}")
        if self.width <= 0.0 or self.height <= 0.0:
            raise ValueError(
                f"Window extent must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def from_corners(cls, x0: float, x1: float, y0: float, y1: float) -> Window:
        """Build a window from two corner coordinates, in either order."""
        return cls(
            x=min(x0, x1),
            y=min(y0, y1),
            width=abs(x1 - x0),
            height=abs(y1 - y0),
        )

    def as_array(self) -> npt.NDArray[np.float32]:
        """Return ``[x, y, width, height]`` as a float32 array for the kernels."""
        return np.array([self.x, self.y, self.width, self.height], dtype=np.float32)


DEFAULT_WINDOW = Window(-0.4, -0.683, 0.265, 0.1)


@dataclass(frozen=True)
class RenderConfig:
    """Immutable parameters of a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        window: Visible complex-plane rectangle.
        samples: Subpixel offsets and filter weights.
        iterations: Escape-time iteration cap.
        tile_width: Tile width in pixels.
        tile_height: Tile height in pixels.
        num_threads: Worker pool size.
        tiles_per_batch: Maximum tiles handed to a worker per dispatch.
        shading: Color mapping strategy.

    Raises:
        ValueError: On construction, if any parameter is degenerate.
    """

    width: int
    height: int
    window: Window
    samples: SampleTable = field(repr=False)
    iterations: int = DEFAULT_ITERATIONS
    tile_width: int = DEFAULT_TILE_SIZE
    tile_height: int = DEFAULT_TILE_SIZE
    num_threads: int = DEFAULT_THREADS
    tiles_per_batch: int = DEFAULT_TILES_PER_BATCH
    shading: Shading = "gradient"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.tile_width <= 0 or self.tile_height <= 0:
            raise ValueError(
                f"Tile dimensions must be positive, got {self.tile_width}x{self.tile_height}"
            )
        if self.tile_width > self.width or self.tile_height > self.height:
            raise ValueError(
                f"Tile dimensions ({self.tile_width}x{self.tile_height}) exceed "
                f"image dimensions ({self.width}x{self.height})"
            )
        if self.iterations < 0:
            raise ValueError(f"Iteration cap must be non-negative, got {self.iterations}")
        if self.num_threads <= 0:
            raise ValueError(f"Thread count must be positive, got {self.num_threads}")
        if self.tiles_per_batch <= 0:
            raise ValueError(f"Tiles per batch must be positive, got {self.tiles_per_batch}")
        if self.shading not in SHADING_MODES:
            raise ValueError(
                f"Unknown shading mode {self.shading!r}, "
                f"expected one of {sorted(SHADING_MODES)}"
            )

    @classmethod
    def create(
        cls,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        window: Window = DEFAULT_WINDOW,
        *,
        sample_count: int = DEFAULT_SAMPLES,
        filter_size: float = DEFAULT_FILTER_SIZE,
        **kwargs: object,
    ) -> RenderConfig:
        """Build a config, precomputing a Halton/Mitchell sample table.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            window: Visible complex-plane rectangle.
            sample_count: Samples per pixel.
            filter_size: Width of the square filter support, in pixels.
            **kwargs: Remaining ``RenderConfig`` fields.
        """
        samples = build_sample_table(sample_count, filter_size)
        return cls(width=width, height=height, window=window, samples=samples, **kwargs)

    @property
    def shading_mode(self) -> int:
        """Shading identifier understood by the compiled kernels."""
        return SHADING_MODES[self.shading]

    @property
    def num_pixels(self) -> int:
        return self.width * self.height

    def with_changes(self, **changes: object) -> RenderConfig:
        """Return a copy with some fields replaced (re-validated)."""
        return replace(self, **changes)
