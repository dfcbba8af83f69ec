"""Tests for the preview module.

This module tests the preview/export and preview/display functionality including:
- Averaging, gamma correction and clamping of accumulated samples
- 8-bit quantization
- PPM and PNG export
- RMSE computation
- Matplotlib preview figures (Agg backend, no window)
"""

import io
import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


class TestGamma:
    """Test gamma 2 encoding."""

    def test_square_root(self):
        from weekend_tracer.preview.export import linear_to_gamma

        image = np.array([[[0.0, 0.25, 1.0]]])
        assert np.allclose(linear_to_gamma(image), [[[0.0, 0.5, 1.0]]])

    def test_negative_maps_to_zero(self):
        from weekend_tracer.preview.export import linear_to_gamma

        assert np.all(linear_to_gamma(np.full((2, 2, 3), -0.5)) == 0.0)


class TestResolveImage:
    """Test the accumulated-to-display conversion."""

    def test_averages_then_gamma(self):
        from weekend_tracer.preview.export import resolve_image

        accumulated = np.full((2, 3, 3), 2.5)
        result = resolve_image(accumulated, samples_per_pixel=10)
        assert result.shape == (2, 3, 3)
        assert np.allclose(result, 0.5)

    def test_clamps_to_intensity_range(self):
        from weekend_tracer.preview.export import resolve_image

        accumulated = np.array([[[4.0, 0.0, 8.0]]])
        result = resolve_image(accumulated, samples_per_pixel=4)
        assert result[0, 0, 0] == pytest.approx(0.999)
        assert result[0, 0, 1] == 0.0
        assert result[0, 0, 2] == pytest.approx(0.999)

    def test_invalid_samples(self):
        from weekend_tracer.preview.export import resolve_image

        with pytest.raises(ValueError, match="samples_per_pixel"):
            resolve_image(np.zeros((1, 1, 3)), samples_per_pixel=0)


class TestQuantization:
    """Test 8-bit conversion."""

    def test_known_values(self):
        from weekend_tracer.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 0.999]]])
        result = image_to_uint8(image)
        assert result.dtype == np.uint8
        # int(255.999 * 0.5) = 127, int(255.999 * 0.999) = 255
        assert result.tolist() == [[[0, 127, 255]]]

    def test_out_of_range_is_clamped(self):
        from weekend_tracer.preview.export import image_to_uint8

        result = image_to_uint8(np.array([[[-1.0, 1.0, 5.0]]]))
        assert result.tolist() == [[[0, 255, 255]]]


class TestPpmExport:
    """Test plain-text PPM output."""

    def test_write_ppm_layout(self):
        from weekend_tracer.preview.export import write_ppm

        image = np.array(
            [
                [[255, 0, 0], [0, 255, 0]],
                [[0, 0, 255], [10, 20, 30]],
            ],
            dtype=np.uint8,
        )
        stream = io.StringIO()
        write_ppm(image, stream)
        assert stream.getvalue().splitlines() == [
            "P3",
            "2 2",
            "255",
            "255 0 0",
            "0 255 0",
            "0 0 255",
            "10 20 30",
        ]

    def test_save_ppm_file(self):
        from weekend_tracer.preview.export import save_image

        image = np.zeros((3, 4, 3), dtype=np.uint8)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_image(image, os.path.join(tmpdir, "out.ppm"))
            with open(path, encoding="ascii") as f:
                lines = f.read().splitlines()
        assert lines[:3] == ["P3", "4 3", "255"]
        assert len(lines) == 3 + 12


class TestPngExport:
    """Test PNG export via Pillow."""

    def test_save_png_round_trip(self):
        from weekend_tracer.preview.export import save_image

        rng = np.random.default_rng(0)
        image = rng.integers(0, 256, size=(5, 7, 3), dtype=np.uint8)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_image(image, os.path.join(tmpdir, "out.png"))
            with PILImage.open(path) as loaded:
                assert loaded.size == (7, 5)
                assert loaded.mode == "RGB"
                np.testing.assert_array_equal(np.asarray(loaded), image)

    def test_extension_case_insensitive(self):
        from weekend_tracer.preview.export import save_image

        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_image(np.zeros((2, 2, 3), dtype=np.uint8), os.path.join(tmpdir, "A.PNG"))
            assert path.exists()

    def test_unsupported_extension(self):
        from weekend_tracer.preview.export import save_image

        with pytest.raises(ValueError, match="Unsupported image format"):
            save_image(np.zeros((2, 2, 3), dtype=np.uint8), "out.jpg")


class TestRmse:
    """Test RMSE computation."""

    def test_identical_images(self):
        from weekend_tracer.preview.export import compute_rmse

        image = np.full((4, 4, 3), 0.3)
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from weekend_tracer.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from weekend_tracer.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))


class TestDisplay:
    """Test Matplotlib figures without opening windows."""

    @pytest.fixture(autouse=True)
    def headless(self, monkeypatch):
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        shown = []
        monkeypatch.setattr(plt, "show", lambda *args, **kwargs: shown.append(kwargs))
        yield shown
        plt.close("all")

    def test_show_comparison_returns_rmse(self, headless):
        from weekend_tracer.preview.display import show_comparison

        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 0.2)
        rmse = show_comparison(a, b, labels=("dark", "grey"), block=False)
        assert rmse == pytest.approx(0.2)
        assert headless == [{"block": False}]

    def test_show_preview(self, headless):
        import matplotlib.pyplot as plt

        from weekend_tracer.camera.thin_lens import ThinLensCamera
        from weekend_tracer.core.renderer import Renderer
        from weekend_tracer.preview.display import show_preview

        renderer = Renderer(ThinLensCamera(image_width=8, samples_per_pixel=1), seed=1)
        renderer.render()
        show_preview(renderer, block=False)

        title = plt.gcf().axes[0].get_title()
        assert title == "Render Preview - 8x8, 1 SPP"
        assert len(headless) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
