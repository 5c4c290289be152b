"""Per-pixel supersampling and tile rasterization.

The compositor maps every subpixel sample of a pixel into the complex
plane, evaluates and shades it, and accumulates a filter-weighted
average. Tiles are rasterized pixel by pixel; each call writes only to the
buffer rows of the pixels inside its own tile, so concurrent tiles never
touch the same memory and no locking is needed.

The buffer is a flat row-major float32 array of shape (width * height, 3).
"""

from __future__ import annotations

import numpy as np
from numba import njit

from src.mandel.core.fractal import mandel, shade


@njit(nogil=True)
def composite_pixel(
    px,
    py,
    buf,
    width,
    height,
    window,
    offsets,
    weights,
    inv_weight_sum,
    iterations,
    shading,
):
    """Compute the filtered color of pixel (px, py) and store it in ``buf``.

    Args:
        px: Pixel column.
        py: Pixel row.
        buf: Flat float32 buffer of shape (width * height, 3).
        width: Image width in pixels.
        height: Image height in pixels.
        window: float32 array ``[x, y, width, height]`` of the plane window.
        offsets: float32 array of shape (N, 2), subpixel offsets in pixels.
        weights: float32 array of shape (N,), filter weights.
        inv_weight_sum: Reciprocal of ``weights.sum()``.
        iterations: Escape-time iteration cap.
        shading: Shading mode identifier.
    """
    center_x = np.float32(px) + np.float32(0.5)
    center_y = np.float32(py) + np.float32(0.5)
    fwidth = np.float32(width)
    fheight = np.float32(height)

    acc_r = np.float32(0.0)
    acc_g = np.float32(0.0)
    acc_b = np.float32(0.0)

    for s in range(weights.shape[0]):
        x = (center_x + offsets[s, 0]) / fwidth * window[2] + window[0]
        y = (center_y + offsets[s, 1]) / fheight * window[3] + window[1]

        value = mandel(x, y, iterations)
        r, g, b = shade(value, iterations, shading)

        w = weights[s]
        acc_r += r * w
        acc_g += g * w
        acc_b += b * w

    # Negative lobes can pull a sparse accumulation below zero
    zero = np.float32(0.0)
    acc_r = max(acc_r, zero)
    acc_g = max(acc_g, zero)
    acc_b = max(acc_b, zero)

    inv = np.float32(inv_weight_sum)
    index = py * width + px
    buf[index, 0] = acc_r * inv
    buf[index, 1] = acc_g * inv
    buf[index, 2] = acc_b * inv


@njit(nogil=True)
def render_tile(
    i,
    j,
    tile_width,
    tile_height,
    buf,
    width,
    height,
    window,
    offsets,
    weights,
    inv_weight_sum,
    iterations,
    shading,
):
    """Rasterize tile (i, j), skipping pixels past the image edges.

    Returns:
        Number of pixels written.
    """
    offset_x = i * tile_width
    offset_y = j * tile_height
    written = 0

    for ty in range(tile_height):
        y = offset_y + ty
        if y >= height:
            break
        for tx in range(tile_width):
            x = offset_x + tx
            if x >= width:
                break
            composite_pixel(
                x, y, buf, width, height, window,
                offsets, weights, inv_weight_sum, iterations, shading,
            )
            written += 1
    return written
