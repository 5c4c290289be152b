"""Sampling diagnostics for inspecting the sampler and reconstruction filter.

Writes three whitespace-separated tables, each with a ``#`` header line,
suitable for gnuplot or similar tools:

    halton23.dat      sample positions            (# X Y)
    mitchell_1d.dat   1D filter curve on a grid   (# X Y)
    mitchell_2d.dat   2D weight at each sample    (# X Y Z)

``plot_sampling_data`` draws the same data with Matplotlib.
"""

from __future__ import annotations

import os
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.mandel.core.filter import DEFAULT_FILTER_SIZE, mitchell, mitchell_weight
from src.mandel.core.sampler import subpixel_offsets

# Number of Halton points written to the sample tables
DIAGNOSTIC_SAMPLES = 1024

# Grid step of the 1D filter curve
CURVE_STEP = 0.01


def sampling_data(
    count: int = DIAGNOSTIC_SAMPLES,
    size: float = DEFAULT_FILTER_SIZE,
) -> dict[str, npt.NDArray[np.float64]]:
    """Compute the diagnostic tables without writing them.

    Returns:
        Mapping of table name to an array with one row per line:
        ``"halton23"`` (N, 2), ``"mitchell_1d"`` (M, 2), ``"mitchell_2d"`` (N, 3).
    """
    offsets = subpixel_offsets(count, size).astype(np.float64)

    xs = np.linspace(-size, size, int(round(2.0 * size / CURVE_STEP)) + 1)
    curve = mitchell(xs / size)

    weights = mitchell_weight(offsets, size / 2.0)

    return {
        "halton23": offsets,
        "mitchell_1d": np.column_stack([xs, curve]),
        "mitchell_2d": np.column_stack([offsets, weights]),
    }


_HEADERS = {
    "halton23": "X Y",
    "mitchell_1d": "X Y",
    "mitchell_2d": "X Y Z",
}


def write_sampling_data(
    directory: str | os.PathLike[str],
    count: int = DIAGNOSTIC_SAMPLES,
    size: float = DEFAULT_FILTER_SIZE,
) -> list[Path]:
    """Write the three diagnostic tables into ``directory``.

    Args:
        directory: Output directory, created if missing.
        count: Number of Halton samples.
        size: Filter support width.

    Returns:
        Paths of the written files.
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, table in sampling_data(count, size).items():
        path = out_dir / f"{name}.dat"
        np.savetxt(path, table, fmt="%.6g", header=_HEADERS[name], comments="# ")
        written.append(path)
    return written


def plot_sampling_data(
    filepath: str | os.PathLike[str],
    count: int = DIAGNOSTIC_SAMPLES,
    size: float = DEFAULT_FILTER_SIZE,
    figsize: tuple[float, float] = (15, 5),
) -> None:
    """Plot sample positions, the 1D filter curve and the 2D weights side by side."""
    from matplotlib.figure import Figure

    data = sampling_data(count, size)

    fig = Figure(figsize=figsize)
    axes = fig.subplots(1, 3)

    positions = data["halton23"]
    axes[0].scatter(positions[:, 0], positions[:, 1], s=2)
    axes[0].set_title(f"Halton(2,3), {count} samples")
    axes[0].set_aspect("equal")

    curve = data["mitchell_1d"]
    axes[1].plot(curve[:, 0], curve[:, 1])
    axes[1].axhline(0.0, color="gray", linewidth=0.5)
    axes[1].set_title("Mitchell-Netravali (B=C=1/3)")

    weighted = data["mitchell_2d"]
    points = axes[2].scatter(weighted[:, 0], weighted[:, 1], c=weighted[:, 2], s=4, cmap="coolwarm")
    axes[2].set_title("2D sample weights")
    axes[2].set_aspect("equal")
    fig.colorbar(points, ax=axes[2])

    fig.tight_layout()
    fig.savefig(filepath)
