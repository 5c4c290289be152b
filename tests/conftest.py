"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules: small render
configurations that keep the numba kernels cheap to run while still
exercising partial edge tiles and multiple worker threads.
"""

import pytest


@pytest.fixture
def interior_window():
    """A tiny window around the origin, entirely inside the main cardioid."""
    from src.mandel.core.config import Window

    return Window(-0.05, -0.05, 0.1, 0.1)


@pytest.fixture
def exterior_window():
    """A window far outside the set, where every point escapes immediately."""
    from src.mandel.core.config import Window

    return Window(10.0, 10.0, 1.0, 1.0)


@pytest.fixture
def small_config():
    """A 37x23 render with 8x8 tiles, so the right and bottom tiles are partial."""
    from src.mandel.core.config import RenderConfig, Window

    return RenderConfig.create(
        37,
        23,
        Window(-2.0, -1.0, 3.0, 2.0),
        sample_count=4,
        iterations=64,
        tile_width=8,
        tile_height=8,
        num_threads=3,
        tiles_per_batch=2,
    )
