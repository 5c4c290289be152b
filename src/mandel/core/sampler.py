"""Low-discrepancy subpixel sample generation.

This module implements the Halton(2,3) sequence used to place subpixel
samples inside a pixel's filter footprint. The sequence is deterministic
and stateless: point ``i`` depends only on ``i``.

Example:
    >>> from src.mandel.core.sampler import halton23, subpixel_offsets
    >>> halton23(1)
    (0.5, 0.3333333333333333)
    >>> offsets = subpixel_offsets(16, size=2.0)
    >>> offsets.shape
    (16, 2)
"""

import numpy as np
import numpy.typing as npt


def halton(index: int, base: int) -> float:
    """Compute the radical inverse of ``index`` in ``base``.

    Digits of ``index`` are mirrored around the radix point, producing the
    van der Corput sequence for the given base.

    Args:
        index: Non-negative sequence index.
        base: Integer base, at least 2.

    Returns:
        The radical inverse in ``[0, 1)``.

    Raises:
        ValueError: If ``index`` is negative or ``base`` is less than 2.
    """
    if index < 0:
        raise ValueError(f"Halton index must be non-negative, got {index}")
    if base < 2:
        raise ValueError(f"Halton base must be at least 2, got {base}")

    result = 0.0
    f = 1.0 / base
    i = index
    while i > 0:
        result += f * (i % base)
        i //= base
        f /= base
    return result


def halton23(index: int) -> tuple[float, float]:
    """Return point ``index`` of the 2D Halton sequence in bases 2 and 3."""
    return (halton(index, 2), halton(index, 3))


def subpixel_offsets(count: int, size: float = 2.0) -> npt.NDArray[np.float32]:
    """Generate ``count`` subpixel sample offsets.

    Takes Halton(2,3) points ``0..count-1``, recenters each coordinate to
    ``[-0.5, 0.5)`` and scales it by the filter support ``size``.

    Args:
        count: Number of samples to generate.
        size: Width of the square filter support, in pixels.

    Returns:
        Array of shape (count, 2) with dtype float32, in pixel units.
    """
    if count < 0:
        raise ValueError(f"Sample count must be non-negative, got {count}")

    offsets = np.empty((count, 2), dtype=np.float32)
    for i in range(count):
        hx, hy = halton23(i)
        offsets[i, 0] = (hx - 0.5) * size
        offsets[i, 1] = (hy - 0.5) * size
    return offsets
