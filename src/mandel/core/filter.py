"""Mitchell-Netravali reconstruction filter and precomputed sample tables.

The renderer supersamples each pixel with a fixed set of subpixel offsets.
Each offset carries a weight from a separable Mitchell-Netravali filter;
the weights are signed because the kernel has negative lobes. Offsets,
weights and the reciprocal of the weight sum are computed once per render
and shared read-only by every worker thread.

Example:
    >>> from src.mandel.core.filter import build_sample_table
    >>> table = build_sample_table(64, filter_size=2.0)
    >>> table.count
    64
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.mandel.core.sampler import subpixel_offsets

# =============================================================================
# Filter Constants
# =============================================================================

# B = C = 1/3, the parameterization recommended by Mitchell and Netravali
MITCHELL_B = 1.0 / 3.0
MITCHELL_C = 1.0 / 3.0

# Default square filter support, in pixels
DEFAULT_FILTER_SIZE = 2.0


def mitchell(
    x: float | npt.ArrayLike,
    b: float = MITCHELL_B,
    c: float = MITCHELL_C,
) -> float | npt.NDArray[np.float64]:
    """Evaluate the 1D Mitchell-Netravali kernel.

    The argument is scaled by 2 and folded to its absolute value, so the
    kernel is non-zero on the open interval (-1, 1). The two cubic branches
    meet at ``|2x| = 1``.

    Args:
        x: Position, as a scalar or array.
        b: The B parameter.
        c: The C parameter.

    Returns:
        Kernel value(s), a float for scalar input or an array otherwise.
    """
    ax = np.abs(2.0 * np.asarray(x, dtype=np.float64))
    ax2 = ax * ax
    ax3 = ax2 * ax

    inner = (
        (12.0 - 9.0 * b - 6.0 * c) * ax3
        + (-18.0 + 12.0 * b + 6.0 * c) * ax2
        + (6.0 - 2.0 * b)
    ) / 6.0
    outer = (
        (-b - 6.0 * c) * ax3
        + (6.0 * b + 30.0 * c) * ax2
        + (-12.0 * b - 48.0 * c) * ax
        + (8.0 * b + 24.0 * c)
    ) / 6.0

    result = np.where(ax < 1.0, inner, np.where(ax < 2.0, outer, 0.0))
    if result.ndim == 0:
        return float(result)
    return result


def mitchell_weight(
    offset: tuple[float, float] | npt.ArrayLike,
    half_size: float,
) -> float | npt.NDArray[np.float64]:
    """Evaluate the separable 2D filter weight at a subpixel offset.

    Args:
        offset: (x, y) offset in pixels, or an array of shape (N, 2).
        half_size: Half the width of the square filter support.

    Returns:
        ``mitchell(x / half_size) * mitchell(y / half_size)``.
    """
    points = np.asarray(offset, dtype=np.float64)
    inv = 1.0 / half_size
    return mitchell(points[..., 0] * inv) * mitchell(points[..., 1] * inv)


@dataclass(frozen=True, eq=False)
class SampleTable:
    """Subpixel offsets paired 1:1 with filter weights.

    Attributes:
        offsets: Array of shape (N, 2), dtype float32, in pixel units.
        weights: Array of shape (N,), dtype float32.
        weight_sum: Sum of all weights.
        inv_weight_sum: Cached reciprocal of ``weight_sum``.
    """

    offsets: npt.NDArray[np.float32]
    weights: npt.NDArray[np.float32]
    weight_sum: float
    inv_weight_sum: float

    @classmethod
    def from_arrays(
        cls,
        offsets: npt.ArrayLike,
        weights: npt.ArrayLike,
    ) -> SampleTable:
        """Build a table from explicit offsets and weights.

        Raises:
            ValueError: If the table is empty, the shapes disagree, or the
                weights sum to zero, a non-finite value, or a value
                whose float32 reciprocal overflows.
        """
        offsets_arr = np.array(offsets, dtype=np.float32).reshape(-1, 2)
        weights_arr = np.array(weights, dtype=np.float32).reshape(-1)

        if offsets_arr.shape[0] == 0:
            raise ValueError("Sample table must contain at least one sample")
        if offsets_arr.shape[0] != weights_arr.shape[0]:
            raise ValueError(
                f"Offset count ({offsets_arr.shape[0]}) does not match "
                f"weight count ({weights_arr.shape[0]})"
            )

        weight_sum = float(np.sum(weights_arr, dtype=np.float32))
        if not math.isfinite(weight_sum) or weight_sum == 0.0:
            raise ValueError(f"Sample weights must have a non-zero sum, got {weight_sum}")

        with np.errstate(over="ignore", divide="ignore"):
            inv_weight_sum = float(np.float32(1.0) / np.float32(weight_sum))
        if not math.isfinite(inv_weight_sum):
            raise ValueError(
                f"Sample weight sum {weight_sum} is too small to normalize by"
            )

        offsets_arr.setflags(write=False)
        weights_arr.setflags(write=False)
        return cls(
            offsets=offsets_arr,
            weights=weights_arr,
            weight_sum=weight_sum,
            inv_weight_sum=inv_weight_sum,
        )

    @classmethod
    def single(cls) -> SampleTable:
        """One sample at the pixel center with unit weight (no supersampling)."""
        return cls.from_arrays([(0.0, 0.0)], [1.0])

    @property
    def count(self) -> int:
        """Number of samples per pixel."""
        return int(self.weights.shape[0])

    def __repr__(self) -> str:
        return f"SampleTable(count={self.count}, weight_sum={self.weight_sum:.6g})"


def build_sample_table(
    count: int,
    filter_size: float = DEFAULT_FILTER_SIZE,
) -> SampleTable:
    """Precompute Halton(2,3) offsets and their Mitchell-Netravali weights.

    Args:
        count: Number of samples per pixel.
        filter_size: Width of the square filter support, in pixels.

    Returns:
        The sample table shared by all tiles of a render.

    Raises:
        ValueError: If ``count`` or ``filter_size`` is not positive, or the
            resulting weights sum to zero.
    """
    if count <= 0:
        raise ValueError(f"Sample count must be positive, got {count}")
    if not filter_size > 0.0:
        raise ValueError(f"Filter size must be positive, got {filter_size}")

    offsets = subpixel_offsets(count, filter_size)
    weights = mitchell_weight(offsets, filter_size / 2.0)
    return SampleTable.from_arrays(offsets, np.atleast_1d(weights))
