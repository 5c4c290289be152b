"""Python implementation of the supersampled Mandelbrot renderer.

This package renders still images of the Mandelbrot set using a
thread-pooled tile scheduler, with support for:
- Halton(2,3) low-discrepancy subpixel sampling
- Mitchell-Netravali reconstruction filtering
- Numba-compiled escape-time and shading kernels that release the GIL
- Plain-text PPM (P3) and PNG output

Subpackages:
    core: Sampling, filtering, fractal kernels, configuration and scheduling
    preview: Image export and sampling diagnostics
"""

__version__ = "0.1.0"
