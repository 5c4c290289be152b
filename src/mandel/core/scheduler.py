"""Parallel tile scheduler.

The image is partitioned into a grid of tiles. Tile indices are shuffled
(tiles on the fractal boundary cost far more than interior or exterior
tiles, so a random order keeps expensive tiles from clustering on one
worker) and handed out in batches to a fixed number of worker slots.

Each slot is either idle (``None``) or busy (holding a ``Future``). The
orchestrating thread fills every idle slot from the front of the queue,
then blocks until at least one busy slot completes and frees it. The loop
ends once the queue is empty and every slot is idle.

Example:
    >>> from src.mandel.core.scheduler import TileGrid
    >>> grid = TileGrid(width=100, height=50, tile_width=16, tile_height=16)
    >>> grid.width_tiles, grid.height_tiles
    (7, 4)
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.mandel.core.compositor import render_tile
from src.mandel.core.config import RenderConfig

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (tiles_completed, total_tiles)
ProgressCallback = Callable[[int, int], None]


class RenderCancelledError(RuntimeError):
    """Raised when a render is cancelled before every tile completed.

    Attributes:
        tiles_completed: Number of tiles fully written before the stop.
        total_tiles: Number of tiles in the grid.
    """

    def __init__(self, tiles_completed: int, total_tiles: int) -> None:
        super().__init__(
            f"Render cancelled after {tiles_completed}/{total_tiles} tiles"
        )
        self.tiles_completed = tiles_completed
        self.total_tiles = total_tiles


@dataclass(frozen=True)
class TileGrid:
    """Mapping between tile indices, tile coordinates and pixel rectangles."""

    width: int
    height: int
    tile_width: int
    tile_height: int

    @classmethod
    def from_config(cls, config: RenderConfig) -> TileGrid:
        return cls(config.width, config.height, config.tile_width, config.tile_height)

    @property
    def width_tiles(self) -> int:
        return -(-self.width // self.tile_width)

    @property
    def height_tiles(self) -> int:
        return -(-self.height // self.tile_height)

    @property
    def num_tiles(self) -> int:
        return self.width_tiles * self.height_tiles

    def tile_coords(self, index: int) -> tuple[int, int]:
        """Return tile (i, j) for a tile index."""
        if not 0 <= index < self.num_tiles:
            raise IndexError(f"Tile index {index} out of range [0, {self.num_tiles})")
        return index % self.width_tiles, index // self.width_tiles

    def tile_rect(self, index: int) -> tuple[int, int, int, int]:
        """Return the in-bounds pixel rectangle ``(x0, y0, x1, y1)`` of a tile.

        The rectangle is half-open and clipped to the image, so edge tiles
        may be smaller than the nominal tile size.
        """
        i, j = self.tile_coords(index)
        x0 = i * self.tile_width
        y0 = j * self.tile_height
        x1 = min(x0 + self.tile_width, self.width)
        y1 = min(y0 + self.tile_height, self.height)
        return x0, y0, x1, y1

    def tile_pixels(self, index: int) -> Iterator[tuple[int, int]]:
        """Yield the (x, y) coordinates of every in-bounds pixel of a tile."""
        x0, y0, x1, y1 = self.tile_rect(index)
        for y in range(y0, y1):
            for x in range(x0, x1):
                yield x, y


def render_batch(
    tiles: Iterable[int],
    grid: TileGrid,
    config: RenderConfig,
    buf: npt.NDArray[np.float32],
) -> int:
    """Rasterize a batch of tiles sequentially on the calling thread.

    Args:
        tiles: Tile indices into ``grid``.
        grid: The tile grid the indices refer to.
        config: The render configuration.
        buf: Flat float32 pixel buffer.

    Returns:
        Number of tiles rasterized.
    """
    window = config.window.as_array()
    samples = config.samples
    shading = config.shading_mode

    count = 0
    for index in tiles:
        i, j = grid.tile_coords(int(index))
        render_tile(
            i,
            j,
            grid.tile_width,
            grid.tile_height,
            buf,
            grid.width,
            grid.height,
            window,
            samples.offsets,
            samples.weights,
            samples.inv_weight_sum,
            config.iterations,
            shading,
        )
        count += 1
    return count


def tile_order(
    num_tiles: int,
    *,
    seed: int | None = None,
    shuffle: bool = True,
) -> npt.NDArray[np.int64]:
    """Return the dispatch order of tile indices ``0..num_tiles-1``.

    Args:
        num_tiles: Number of tiles in the grid.
        seed: Seed for the permutation. ``None`` draws fresh entropy.
        shuffle: If False, return the identity order.
    """
    if not shuffle:
        return np.arange(num_tiles, dtype=np.int64)
    rng = np.random.default_rng(seed)
    return rng.permutation(num_tiles).astype(np.int64)


class TileScheduler:
    """Dispatches tile batches to a fixed-size pool of worker threads.

    Attributes:
        config: The render configuration.
        grid: The tile grid derived from ``config``.
    """

    def __init__(
        self,
        config: RenderConfig,
        *,
        seed: int | None = None,
        shuffle: bool = True,
    ) -> None:
        self.config = config
        self.grid = TileGrid.from_config(config)
        self._seed = seed
        self._shuffle = shuffle

    def order(self) -> npt.NDArray[np.int64]:
        """Return the tile dispatch order for this scheduler."""
        return tile_order(self.grid.num_tiles, seed=self._seed, shuffle=self._shuffle)

    def run(
        self,
        buf: npt.NDArray[np.float32],
        *,
        callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """Render every tile into ``buf``.

        Args:
            buf: Flat float32 pixel buffer of shape (width * height, 3).
            callback: Called as ``callback(tiles_completed, total_tiles)``
                on the calling thread after each batch completes.
            cancel_event: When set, no further batches are dispatched.

        Returns:
            Number of tiles rendered.

        Raises:
            RenderCancelledError: If ``cancel_event`` stopped the render early.
        """
        config = self.config
        total = self.grid.num_tiles
        width_tiles = self.grid.width_tiles
        pending = deque(int(index) for index in self.order())
        slots: list[Future[int] | None] = [None] * config.num_threads
        completed = 0

        logger.info(
            "Rendering %d tiles (%dx%d grid) on %d threads",
            total, width_tiles, self.grid.height_tiles, config.num_threads,
        )

        with ThreadPoolExecutor(
            max_workers=config.num_threads,
            thread_name_prefix="tile-worker",
        ) as executor:
            while True:
                cancelled = cancel_event is not None and cancel_event.is_set()

                for slot, future in enumerate(slots):
                    if future is not None or not pending or cancelled:
                        continue
                    batch_size = min(config.tiles_per_batch, len(pending))
                    batch = [pending.popleft() for _ in range(batch_size)]
                    slots[slot] = executor.submit(
                        render_batch, batch, self.grid, config, buf
                    )
                    logger.debug("[%d] Started %d tiles.", slot, batch_size)

                busy = [future for future in slots if future is not None]
                if not busy:
                    break

                done, _ = wait(busy, return_when=FIRST_COMPLETED)
                for slot, future in enumerate(slots):
                    if future is None or future not in done:
                        continue
                    slots[slot] = None
                    completed += future.result()
                    logger.debug("[%d] Complete. (%d pending)", slot, len(pending))
                    if callback is not None:
                        callback(completed, total)

        if pending:
            logger.warning("Render cancelled with %d tiles pending", len(pending))
            raise RenderCancelledError(completed, total)

        logger.info("Rendered %d tiles", completed)
        return completed
