"""Tests for the top-level renderer.

Tests cover:
- Buffer ownership, image shapes and state
- Schedule independence and reproducibility of the output
- End-to-end colors for windows inside and outside the set
- Cancellation state
"""

import threading

import numpy as np
import pytest


class TestMandelbrotRendererInit:
    """Test renderer initialization."""

    def test_init_allocates_zero_buffer(self, small_config):
        """Test that the buffer starts zero-filled with one row per pixel."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config)

        assert renderer.buffer.shape == (37 * 23, 3)
        assert renderer.buffer.dtype == np.float32
        assert not np.any(renderer.buffer)
        assert not renderer.is_complete

    def test_dimensions(self, small_config):
        """Test width and height properties."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config)

        assert (renderer.width, renderer.height) == (37, 23)

    def test_repr(self, small_config):
        """Test the string representation."""
        from src.mandel.core.renderer import MandelbrotRenderer

        text = repr(MandelbrotRenderer(small_config))

        assert "width=37" in text
        assert "samples=4" in text


class TestMandelbrotRendererRender:
    """Test render functionality."""

    def test_render_completes(self, small_config):
        """Test that render marks the image complete and times itself."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config, seed=1)
        renderer.render()

        assert renderer.is_complete
        assert renderer.elapsed > 0.0
        assert np.all(renderer.buffer > 0.0)

    def test_image_shapes(self, small_config):
        """Test float and 8-bit image views."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config, seed=1)
        renderer.render()

        image = renderer.get_image_numpy()
        image_uint8 = renderer.get_image_uint8()

        assert image.shape == (23, 37, 3)
        assert image_uint8.shape == (23, 37, 3)
        assert image_uint8.dtype == np.uint8

    def test_image_is_row_major_view(self, small_config):
        """Test that pixel (x, y) lives at buffer index y * width + x."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config, seed=1)
        renderer.render()

        image = renderer.get_image_numpy()
        assert np.array_equal(image[5, 11], renderer.buffer[5 * 37 + 11])

    def test_image_is_read_only(self, small_config):
        """Test that the returned image cannot write into the render buffer."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config, seed=1)
        renderer.render()
        before = renderer.buffer.copy()

        image = renderer.get_image_numpy()

        assert not image.flags.writeable
        with pytest.raises(ValueError):
            image[0, 0, 0] = 1.0
        assert renderer.buffer.flags.writeable
        assert np.array_equal(renderer.buffer, before)

    def test_same_seed_is_reproducible(self, small_config):
        """Test that rendering twice gives identical buffers."""
        from src.mandel.core.renderer import MandelbrotRenderer

        first = MandelbrotRenderer(small_config, seed=7)
        second = MandelbrotRenderer(small_config, seed=7)
        first.render()
        second.render()

        assert np.array_equal(first.buffer, second.buffer)

    def test_output_independent_of_schedule(self, small_config):
        """Test that tile order, thread count and batch size do not change pixels."""
        from src.mandel.core.renderer import MandelbrotRenderer

        reference = MandelbrotRenderer(small_config.with_changes(num_threads=1), shuffle=False)
        reference.render()

        for seed, threads, per_batch in ((3, 2, 1), (11, 4, 3), (None, 8, 5)):
            config = small_config.with_changes(num_threads=threads, tiles_per_batch=per_batch)
            renderer = MandelbrotRenderer(config, seed=seed)
            renderer.render()
            assert np.array_equal(renderer.buffer, reference.buffer)

    def test_rerender_resets_buffer(self, small_config):
        """Test that a second render on the same renderer gives the same image."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config, seed=2)
        renderer.render()
        first = renderer.buffer.copy()
        renderer.render()

        assert np.array_equal(renderer.buffer, first)

    def test_callback_forwarded(self, small_config):
        """Test that the progress callback reaches the scheduler."""
        from src.mandel.core.renderer import MandelbrotRenderer

        calls = []
        MandelbrotRenderer(small_config).render(callback=lambda c, t: calls.append((c, t)))

        assert calls[-1] == (15, 15)

    def test_grayscale_shading(self, small_config):
        """Test that grayscale output has equal channels."""
        from src.mandel.core.renderer import MandelbrotRenderer

        renderer = MandelbrotRenderer(small_config.with_changes(shading="grayscale"))
        renderer.render()
        image = renderer.get_image_numpy()

        assert np.allclose(image[..., 0], image[..., 1])
        assert np.allclose(image[..., 1], image[..., 2])


class TestEndToEnd:
    """End-to-end colors for known windows."""

    def _render_single_tile(self, window):
        from src.mandel.core.config import RenderConfig
        from src.mandel.core.filter import SampleTable
        from src.mandel.core.renderer import MandelbrotRenderer

        config = RenderConfig(
            width=4,
            height=4,
            window=window,
            samples=SampleTable.single(),
            iterations=256,
            tile_width=4,
            tile_height=4,
            num_threads=1,
            tiles_per_batch=1,
        )
        renderer = MandelbrotRenderer(config, shuffle=False)
        renderer.render()
        return renderer.get_image_uint8()

    def test_window_inside_set(self, interior_window):
        """Test that a window inside the set is uniformly the gradient end color."""
        from src.mandel.core.fractal import GRADIENT_END
        from src.mandel.preview.export import image_to_uint8

        image = self._render_single_tile(interior_window)
        expected = image_to_uint8(np.array([[GRADIENT_END]], dtype=np.float32))[0, 0]

        assert np.all(image == expected)

    def test_window_outside_set(self, exterior_window):
        """Test that a window far outside the set is uniformly the start color."""
        from src.mandel.core.fractal import GRADIENT_START
        from src.mandel.preview.export import image_to_uint8

        image = self._render_single_tile(exterior_window)
        expected = image_to_uint8(np.array([[GRADIENT_START]], dtype=np.float32))[0, 0]

        assert np.all(image == expected)


class TestMandelbrotRendererCancel:
    """Test cancellation."""

    def test_cancelled_render_is_incomplete(self, small_config):
        """Test that cancellation raises and leaves the render incomplete."""
        from src.mandel.core.renderer import MandelbrotRenderer
        from src.mandel.core.scheduler import RenderCancelledError

        event = threading.Event()
        event.set()
        renderer = MandelbrotRenderer(small_config)

        with pytest.raises(RenderCancelledError):
            renderer.render(cancel_event=event)

        assert not renderer.is_complete
