"""Preview module for output and diagnostics.

Components:
    export: Gamma encoding, PPM (P3) and Pillow raster output
    diagnostics: Sampler and filter data tables and plots

Example:
    >>> from src.mandel.preview import write_ppm
    >>> write_ppm(renderer.get_image_numpy(), "mandel.ppm")
"""

from src.mandel.preview.diagnostics import (
    plot_sampling_data,
    sampling_data,
    write_sampling_data,
)
from src.mandel.preview.export import (
    format_ppm,
    image_to_uint8,
    read_ppm,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    # Export functions
    "image_to_uint8",
    "format_ppm",
    "write_ppm",
    "read_ppm",
    "save_png",
    "save_image",
    # Diagnostics
    "sampling_data",
    "write_sampling_data",
    "plot_sampling_data",
]
