"""Image export utilities for rendered images.

This module converts the renderer's linear-light float buffer into 8-bit
gamma-encoded pixels and writes them to disk.

Supported formats:
    - PPM (plain-text P3)
    - PNG and other raster formats (8-bit via Pillow)

Example:
    >>> from src.mandel.preview.export import write_ppm
    >>> write_ppm(renderer.get_image_numpy(), "mandel.ppm")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PathLike = str | os.PathLike[str]


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Gamma-encode a linear image and quantize it to 8 bits.

    Each channel becomes ``int(c ** (1 / gamma) * 255)``, truncated rather
    than rounded, then clamped to [0, 255].

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.2).

    Returns:
        Array of the same shape with dtype uint8.
    """
    linear = np.maximum(np.asarray(image, dtype=np.float32), np.float32(0.0))
    encoded = np.power(linear, np.float32(1.0 / gamma)) * np.float32(255.0)
    return np.clip(encoded.astype(np.int32), 0, 255).astype(np.uint8)


def format_ppm(image_uint8: npt.NDArray[np.uint8]) -> str:
    """Format an 8-bit RGB image as plain-text PPM (P3).

    The header is ``P3 <width> <height> 255`` followed by one line per
    image row.
    """
    height, width = image_uint8.shape[:2]
    lines = [f"P3 {width} {height} 255"]
    for row in image_uint8.reshape(height, width * 3):
        lines.append(" ".join(str(int(v)) for v in row))
    return "\n".join(lines) + "\n"


def write_ppm(
    image: npt.NDArray[np.float32],
    destination: PathLike | IO[str],
    *,
    gamma: float = 2.2,
) -> None:
    """Write a linear image as a plain-text PPM.

    Args:
        image: Linear image array of shape (H, W, 3).
        destination: Output path, or a text file object.
        gamma: Gamma value (default 2.2).
    """
    text = format_ppm(image_to_uint8(image, gamma=gamma))
    if hasattr(destination, "write"):
        destination.write(text)
        return
    Path(destination).write_text(text, encoding="ascii")


def read_ppm(source: PathLike) -> npt.NDArray[np.uint8]:
    """Read a plain-text PPM (P3) file into an array of shape (H, W, 3).

    Raises:
        ValueError: If the file is not a well-formed 8-bit P3 image.
    """
    tokens = []
    for line in Path(source).read_text(encoding="ascii").splitlines():
        tokens.extend(line.split("#", 1)[0].split())

    if len(tokens) < 4 or tokens[0] != "P3":
        raise ValueError(f"{source} is not a plain-text PPM file")

    width, height, max_value = (int(t) for t in tokens[1:4])
    if max_value != 255:
        raise ValueError(f"Unsupported PPM max value {max_value}")

    values = np.array(tokens[4:], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(
            f"Expected {width * height * 3} samples, found {values.size}"
        )
    return values.reshape(height, width, 3).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.float32],
    filepath: PathLike,
    *,
    gamma: float = 2.2,
) -> None:
    """Save a linear image as an 8-bit PNG using Pillow."""
    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma))
    pil_image.save(filepath)


def save_image(
    image: npt.NDArray[np.float32],
    filepath: PathLike,
    *,
    gamma: float = 2.2,
) -> None:
    """Save a linear image, choosing PPM or a Pillow format by suffix."""
    if Path(filepath).suffix.lower() == ".ppm":
        write_ppm(image, filepath, gamma=gamma)
    else:
        save_png(image, filepath, gamma=gamma)
