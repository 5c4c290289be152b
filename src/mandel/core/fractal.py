"""Escape-time evaluation and iteration-count shading kernels.

All kernels are compiled with numba in nopython mode and release the GIL,
so tile workers running on separate threads execute them concurrently.
Arithmetic is single precision throughout.

Note that the orbit starts at ``z = c`` rather than ``z = 0``. This shifts
every escape count by one iteration relative to the textbook definition
and is kept as-is for output compatibility.
"""

import numpy as np
from numba import njit

# =============================================================================
# Shading Constants
# =============================================================================

# Escape counts at or below this value map to the gradient's start color
INTERIOR_CUTOFF = 20

# Linear-light gradient anchors
GRADIENT_START = (0.039947171001526, 0.098689197541096, 0.320381548791812)
GRADIENT_END = (0.819963705323531, 0.827725794455035, 0.851251645184511)

# Shading mode identifiers passed into compiled kernels
SHADING_GRADIENT = 0
SHADING_GRAYSCALE = 1

SHADING_MODES = {
    "gradient": SHADING_GRADIENT,
    "grayscale": SHADING_GRAYSCALE,
}

_START_R, _START_G, _START_B = GRADIENT_START
_END_R, _END_G, _END_B = GRADIENT_END


@njit(nogil=True)
def mandel(c_real, c_imag, iterations):
    """Count iterations of ``z <- z^2 + c`` before ``|z|^2 > 4``.

    Args:
        c_real: Real part of c.
        c_imag: Imaginary part of c.
        iterations: Iteration cap.

    Returns:
        The iteration at which the orbit escaped, or ``iterations``.
    """
    cr = np.float32(c_real)
    ci = np.float32(c_imag)
    two = np.float32(2.0)
    four = np.float32(4.0)

    zr = cr
    zi = ci
    i = 0
    while i < iterations:
        zr2 = zr * zr
        zi2 = zi * zi
        if zr2 + zi2 > four:
            break
        new_real = zr2 - zi2
        new_imag = two * zr * zi
        zr = cr + new_real
        zi = ci + new_imag
        i += 1
    return i


@njit(nogil=True)
def shade_gradient(value, max_iterations):
    """Map an escape count onto the two-stop gradient.

    Counts up to ``INTERIOR_CUTOFF`` get the start color; the rest are
    interpolated linearly towards the end color.
    """
    if value <= INTERIOR_CUTOFF:
        t = np.float32(0.0)
    else:
        # max_iterations == 21 leaves a zero-width ramp
        span = max(max_iterations - (INTERIOR_CUTOFF + 1), 1)
        t = np.float32(value - (INTERIOR_CUTOFF + 1)) / np.float32(span)

    r = np.float32(_START_R) + t * (np.float32(_END_R) - np.float32(_START_R))
    g = np.float32(_START_G) + t * (np.float32(_END_G) - np.float32(_START_G))
    b = np.float32(_START_B) + t * (np.float32(_END_B) - np.float32(_START_B))
    return r, g, b


@njit(nogil=True)
def shade_grayscale(value, max_iterations):
    """Map an escape count to a gray level ``value / max_iterations``."""
    v = np.float32(value) / np.float32(max(max_iterations, 1))
    return v, v, v


@njit(nogil=True)
def shade(value, max_iterations, shading):
    """Dispatch to the shading kernel selected by ``shading``."""
    if shading == SHADING_GRAYSCALE:
        return shade_grayscale(value, max_iterations)
    return shade_gradient(value, max_iterations)
