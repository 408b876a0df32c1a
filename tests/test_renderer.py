"""Unit tests for the row-by-row renderer.

Tests cover:
- RenderSettings validation and aspect ratio derivation
- End-to-end rendering of a tiny scene
- Progress callbacks, the generator form and cancellation
- Determinism for a fixed seed
- Saving to PPM and PNG
"""

import threading

import numpy as np
import pytest


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        from zharko.core.renderer import RenderSettings

        settings = RenderSettings()
        assert (settings.width, settings.height) == (400, 225)
        assert settings.samples_per_pixel == 20
        assert settings.max_depth == 10
        assert settings.seed == 0

    def test_from_aspect_ratio(self):
        from zharko.core.renderer import RenderSettings

        assert RenderSettings.from_aspect_ratio(400, 16.0 / 9.0).height == 225
        assert RenderSettings.from_aspect_ratio(100, 1.0).height == 100
        # Height never drops below one pixel
        assert RenderSettings.from_aspect_ratio(4, 100.0).height == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": 3000},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"seed": -1},
            {"seed": 2**32},
            {"samples_per_pixel": 2**31},
            {"max_depth": 2**31},
        ],
    )
    def test_invalid_settings(self, kwargs):
        from zharko.core.renderer import RenderSettings
        from zharko.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            RenderSettings(**kwargs)

    def test_invalid_aspect_ratio(self):
        from zharko.core.renderer import RenderSettings
        from zharko.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            RenderSettings.from_aspect_ratio(100, 0.0)

    def test_zero_depth_allowed(self):
        from zharko.core.renderer import RenderSettings

        assert RenderSettings(max_depth=0).max_depth == 0

    def test_largest_kernel_counts_allowed(self):
        from zharko.core.renderer import MAX_KERNEL_COUNT, RenderSettings

        settings = RenderSettings(samples_per_pixel=MAX_KERNEL_COUNT, max_depth=MAX_KERNEL_COUNT)
        assert settings.max_depth == 2**31 - 1


@pytest.fixture
def small_sphere_scene(default_camera):
    """A single diffuse sphere at (0, 0, -1), no ground."""
    from zharko.scene.manager import SceneManager

    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
    return scene


class TestRendering:
    """End-to-end rendering tests."""

    def test_single_bounce_sphere_is_black_sky_is_not(self, small_sphere_scene):
        """With one bounce the sphere absorbs everything and the sky shows through."""
        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=5, height=5, samples_per_pixel=4, max_depth=1))
        renderer.render()
        image = renderer.get_image_numpy()

        assert image.shape == (5, 5, 3)
        assert np.all(image[2, 2] == 0.0)
        assert np.all(image[0, 0] > 0.0)
        assert renderer.is_complete

    def test_zero_depth_renders_black(self, small_sphere_scene):
        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=4, height=3, samples_per_pixel=2, max_depth=0))
        renderer.render()
        assert np.all(renderer.get_image_numpy() == 0.0)

    def test_same_seed_is_bit_identical(self, small_sphere_scene):
        from zharko.core.renderer import Renderer, RenderSettings

        settings = RenderSettings(width=8, height=6, samples_per_pixel=4, max_depth=5, seed=42)
        renderer = Renderer(settings)
        renderer.render()
        first = renderer.get_image_numpy()
        renderer.render()
        second = renderer.get_image_numpy()
        assert np.array_equal(first, second)

    def test_rows_are_byte_triples_top_first(self, small_sphere_scene):
        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=3, height=2, samples_per_pixel=1, max_depth=1))
        renderer.render()
        rows = list(renderer.rows())
        assert len(rows) == 2
        assert all(len(row) == 3 for row in rows)
        for row in rows:
            for pixel in row:
                assert all(0 <= c <= 255 for c in pixel)


class TestProgress:
    """Tests for callbacks, the generator form and cancellation."""

    def test_callback_called_once_per_row(self, default_camera):
        from zharko.core.renderer import Renderer, RenderSettings

        calls = []
        renderer = Renderer(RenderSettings(width=4, height=3, samples_per_pixel=1, max_depth=1))
        renderer.render(callback=lambda done, total: calls.append((done, total)))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_generator_form(self, default_camera):
        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=2, height=4, samples_per_pixel=1, max_depth=1))
        progress = list(renderer.render_progressive())
        assert progress[-1] == (4, 4)
        assert renderer.rows_done == 4

    def test_generator_renders_top_row_first(self, default_camera):
        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=2, height=4, samples_per_pixel=1, max_depth=1))
        progress = renderer.render_progressive()
        next(progress)
        image = renderer.get_image_numpy()
        assert np.all(image[0] > 0.0)
        assert np.all(image[1:] == 0.0)
        assert not renderer.is_complete
        progress.close()

    def test_cancellation(self, default_camera):
        from zharko.core.renderer import Renderer, RenderSettings
        from zharko.errors import RenderCancelledError

        cancel = threading.Event()
        renderer = Renderer(RenderSettings(width=2, height=5, samples_per_pixel=1, max_depth=1))

        def cancel_after_two(done, total):
            if done == 2:
                cancel.set()

        with pytest.raises(RenderCancelledError) as exc_info:
            renderer.render(callback=cancel_after_two, cancel_event=cancel)

        assert exc_info.value.rows_done == 2
        assert exc_info.value.total_rows == 5
        assert renderer.rows_done == 2
        assert not renderer.is_complete

    def test_cancel_before_first_row_clears_previous_frame(self, default_camera):
        from zharko.core.renderer import Renderer, RenderSettings
        from zharko.errors import RenderCancelledError

        renderer = Renderer(RenderSettings(width=3, height=3, samples_per_pixel=1, max_depth=1))
        renderer.render()
        assert np.all(renderer.get_image_numpy() > 0.0)

        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RenderCancelledError) as exc_info:
            renderer.render(cancel_event=cancel)

        assert exc_info.value.rows_done == 0
        assert renderer.rows_done == 0
        assert np.all(renderer.get_image_numpy() == 0.0)


class TestSave:
    """Tests for Renderer.save."""

    def test_save_ppm_and_png(self, default_camera, tmp_path):
        from PIL import Image

        from zharko.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=3, height=2, samples_per_pixel=1, max_depth=1))
        renderer.render()

        ppm = tmp_path / "out.ppm"
        renderer.save(ppm)
        assert ppm.read_text().startswith("P3\n3 2\n255\n")

        png = tmp_path / "out.PNG"
        renderer.save(png)
        with Image.open(png) as loaded:
            assert loaded.size == (3, 2)

    def test_unsupported_extension(self, default_camera, tmp_path):
        from zharko.core.renderer import Renderer, RenderSettings
        from zharko.errors import ConfigurationError

        renderer = Renderer(RenderSettings(width=1, height=1, samples_per_pixel=1, max_depth=1))
        with pytest.raises(ConfigurationError):
            renderer.save(tmp_path / "out.jpg")
