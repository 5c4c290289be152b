"""Top-level Mandelbrot render call.

``MandelbrotRenderer`` owns the pixel buffer for a render: it allocates
it zero-filled, hands it to the tile scheduler, and exposes the finished
linear-light image as NumPy arrays for the output stage.

Example:
    >>> from src.mandel.core.config import RenderConfig
    >>> from src.mandel.core.renderer import MandelbrotRenderer
    >>>
    >>> config = RenderConfig.create(width=128, height=64, sample_count=16)
    >>> renderer = MandelbrotRenderer(config, seed=7)
    >>> renderer.render()
    >>> image = renderer.get_image_uint8()
"""

from __future__ import annotations

import logging
import threading
import time

import numpy as np
import numpy.typing as npt

from src.mandel.core.config import RenderConfig
from src.mandel.core.scheduler import ProgressCallback, TileScheduler

logger = logging.getLogger(__name__)


class MandelbrotRenderer:
    """Renders one still image for a fixed configuration.

    Attributes:
        config: The render configuration.
        scheduler: The tile scheduler driving the worker pool.
    """

    def __init__(
        self,
        config: RenderConfig,
        *,
        seed: int | None = None,
        shuffle: bool = True,
    ) -> None:
        """Initialize the renderer.

        Args:
            config: The render configuration.
            seed: Seed for the tile dispatch shuffle.
            shuffle: If False, tiles are dispatched in row-major order.
        """
        self.config = config
        self.scheduler = TileScheduler(config, seed=seed, shuffle=shuffle)
        self._buffer = self._allocate()
        self._complete = False
        self._elapsed = 0.0

    def _allocate(self) -> npt.NDArray[np.float32]:
        return np.zeros((self.config.num_pixels, 3), dtype=np.float32)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def is_complete(self) -> bool:
        """True once every tile of the last render has been written."""
        return self._complete

    @property
    def elapsed(self) -> float:
        """Wall-clock seconds spent in the last render."""
        return self._elapsed

    @property
    def buffer(self) -> npt.NDArray[np.float32]:
        """The flat row-major pixel buffer of shape (width * height, 3)."""
        return self._buffer

    def render(
        self,
        callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Render the image into a freshly zeroed buffer.

        Args:
            callback: Receives (tiles_completed, total_tiles) after each batch.
            cancel_event: Stops dispatch of further batches when set.

        Raises:
            RenderCancelledError: If the render was cancelled.
        """
        self._buffer = self._allocate()
        self._complete = False

        start = time.perf_counter()
        try:
            self.scheduler.run(self._buffer, callback=callback, cancel_event=cancel_event)
        finally:
            self._elapsed = time.perf_counter() - start

        self._complete = True
        logger.info(
            "Rendered %dx%d with %d samples/pixel in %.2fs",
            self.width, self.height, self.config.samples.count, self._elapsed,
        )

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Return the linear-light image as an array of shape (height, width, 3).

        The array is a read-only view of the render buffer.
        """
        image = self._buffer.reshape(self.height, self.width, 3)
        image.setflags(write=False)
        return image

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Return the gamma-encoded 8-bit image of shape (height, width, 3)."""
        from src.mandel.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy(), gamma=gamma)

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the rendered image; the format follows the file suffix."""
        from src.mandel.preview.export import save_image

        save_image(self.get_image_numpy(), filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"MandelbrotRenderer(width={self.width}, height={self.height}, "
            f"samples={self.config.samples.count}, complete={self.is_complete})"
        )
