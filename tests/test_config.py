"""Unit tests for render configuration.

Tests cover:
- Window normalization and validation
- RenderConfig construction, defaults and validation errors
"""

import dataclasses

import numpy as np
import pytest


class TestWindow:
    """Tests for the plane window."""

    def test_origin_and_extent(self):
        """Test direct construction from origin and extent."""
        from src.mandel.core.config import Window

        window = Window(-2.0, -1.0, 3.0, 2.0)

        assert (window.x, window.y, window.width, window.height) == (-2.0, -1.0, 3.0, 2.0)

    def test_from_corners(self):
        """Test that corner pairs normalize to origin and extent."""
        from src.mandel.core.config import Window

        window = Window.from_corners(-2.0, 1.0, -1.0, 1.0)

        assert window == Window(-2.0, -1.0, 3.0, 2.0)

    def test_from_corners_any_order(self):
        """Test that swapped corners give the same window."""
        from src.mandel.core.config import Window

        assert Window.from_corners(1.0, -2.0, 1.0, -1.0) == Window.from_corners(-2.0, 1.0, -1.0, 1.0)

    def test_as_array(self):
        """Test the float32 kernel representation."""
        from src.mandel.core.config import Window

        array = Window(-0.4, -0.683, 0.265, 0.1).as_array()

        assert array.dtype == np.float32
        assert np.allclose(array, [-0.4, -0.683, 0.265, 0.1])

    def test_immutable(self):
        """Test that windows cannot be modified."""
        from src.mandel.core.config import Window

        window = Window(0.0, 0.0, 1.0, 1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            window.x = 1.0

    @pytest.mark.parametrize("extent", [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0)])
    def test_rejects_non_positive_extent(self, extent):
        """Test that empty or inverted extents are rejected."""
        from src.mandel.core.config import Window

        with pytest.raises(ValueError, match="extent must be positive"):
            Window(0.0, 0.0, *extent)

    def test_rejects_non_finite(self):
        """Test that NaN and infinite coordinates are rejected."""
        from src.mandel.core.config import Window

        with pytest.raises(ValueError, match="finite"):
            Window(float("nan"), 0.0, 1.0, 1.0)
        with pytest.raises(ValueError, match="finite"):
            Window(0.0, 0.0, float("inf"), 1.0)


class TestRenderConfig:
    """Tests for RenderConfig."""

    def test_create_builds_sample_table(self):
        """Test that create precomputes the sample table."""
        from src.mandel.core.config import RenderConfig

        config = RenderConfig.create(64, 32, sample_count=16, tile_width=8, tile_height=8)

        assert config.samples.count == 16
        assert config.num_pixels == 64 * 32

    def test_defaults(self):
        """Test the default render parameters."""
        from src.mandel.core.config import DEFAULT_WINDOW, RenderConfig

        config = RenderConfig.create(sample_count=4)

        assert (config.width, config.height) == (675, 250)
        assert (config.tile_width, config.tile_height) == (16, 16)
        assert config.iterations == 256
        assert config.num_threads == 6
        assert config.tiles_per_batch == 27
        assert config.window == DEFAULT_WINDOW
        assert config.shading == "gradient"

    def test_shading_mode(self):
        """Test that shading names map to kernel identifiers."""
        from src.mandel.core.config import RenderConfig
        from src.mandel.core.fractal import SHADING_GRADIENT, SHADING_GRAYSCALE

        config = RenderConfig.create(32, 32, sample_count=4)

        assert config.shading_mode == SHADING_GRADIENT
        assert config.with_changes(shading="grayscale").shading_mode == SHADING_GRAYSCALE

    def test_with_changes_revalidates(self):
        """Test that replaced fields are validated."""
        from src.mandel.core.config import RenderConfig

        config = RenderConfig.create(32, 32, sample_count=4)

        with pytest.raises(ValueError, match="Thread count"):
            config.with_changes(num_threads=0)

    def test_immutable(self):
        """Test that configs cannot be modified."""
        from src.mandel.core.config import RenderConfig

        config = RenderConfig.create(32, 32, sample_count=4)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.width = 64

    @pytest.mark.parametrize(
        ("changes", "message"),
        [
            ({"width": 0}, "Image dimensions"),
            ({"height": -4}, "Image dimensions"),
            ({"tile_width": 0}, "Tile dimensions must be positive"),
            ({"tile_height": 64}, "exceed"),
            ({"iterations": -1}, "Iteration cap"),
            ({"num_threads": 0}, "Thread count"),
            ({"tiles_per_batch": 0}, "Tiles per batch"),
            ({"shading": "rainbow"}, "Unknown shading"),
        ],
    )
    def test_rejects_degenerate_config(self, changes, message):
        """Test that degenerate parameters raise at construction."""
        from src.mandel.core.config import RenderConfig, Window
        from src.mandel.core.filter import SampleTable

        params = {
            "width": 32,
            "height": 32,
            "window": Window(-2.0, -1.0, 3.0, 2.0),
            "samples": SampleTable.single(),
            "tile_width": 8,
            "tile_height": 8,
        }
        params.update(changes)

        with pytest.raises(ValueError, match=message):
            RenderConfig(**params)

    def test_rejects_empty_sample_list(self):
        """Test that create rejects zero samples."""
        from src.mandel.core.config import RenderConfig

        with pytest.raises(ValueError, match="Sample count"):
            RenderConfig.create(32, 32, sample_count=0)

    def test_tile_equal_to_image_is_allowed(self):
        """Test that a single tile covering the image is valid."""
        from src.mandel.core.config import DEFAULT_WINDOW, RenderConfig
        from src.mandel.core.filter import SampleTable

        config = RenderConfig(
            4, 4, DEFAULT_WINDOW, SampleTable.single(), tile_width=4, tile_height=4
        )

        assert config.tile_width == config.width
