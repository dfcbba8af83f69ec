"""Unit tests for the colour estimator and render kernels.

Tests cover:
- Render target setup and clearing
- ray_colour: depth budget, background, absorption and material paths
- Normal visualization
- Accumulation into the render target and determinism
- Error handling for missing setup and bad row ranges
"""

import numpy as np
import pytest

HORIZON = (0.75, 0.85, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


def setup_small_render(width=8, height=6, **camera_overrides):
    from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera
    from weekend_tracer.core.integrator import setup_render_target

    camera = ThinLensCamera(aspect_ratio=width / height, image_width=width, **camera_overrides)
    setup_camera(camera)
    setup_render_target(camera.image_width, camera.image_height)
    return camera


class TestRenderTargetSetup:
    """Tests for render target initialization."""

    def test_setup_render_target(self):
        from weekend_tracer.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 48)
        assert get_image_dimensions() == (64, 48)

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (2000, 10), (10, 2000)])
    def test_invalid_dimensions(self, width, height):
        from weekend_tracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_setup_clears_existing(self):
        from weekend_tracer.core.integrator import (
            get_accumulated_image_numpy,
            render_image,
            setup_render_target,
        )

        setup_small_render()
        render_image(samples=1)
        assert get_accumulated_image_numpy().sum() > 0.0

        setup_render_target(8, 6)
        assert get_accumulated_image_numpy().sum() == 0.0

    def test_clear_render_target(self):
        from weekend_tracer.core.integrator import (
            clear_render_target,
            get_sample_count_numpy,
            render_image,
        )

        setup_small_render()
        render_image(samples=2)
        assert np.all(get_sample_count_numpy() == 2)
        clear_render_target()
        assert np.all(get_sample_count_numpy() == 0)


class TestRayColour:
    """Tests for ray_colour through trace_ray."""

    def test_zero_depth_is_black(self):
        from weekend_tracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 1.0, 0.0), SKY_BLUE),
            ((0.0, -1.0, 0.0), (1.0, 1.0, 1.0)),
            ((0.0, 0.0, -1.0), HORIZON),
            ((3.0, 0.0, 4.0), HORIZON),
        ],
    )
    def test_miss_returns_sky(self, direction, expected):
        from weekend_tracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), direction, max_depth=1) == pytest.approx(expected)

    def test_hit_with_depth_one_is_black(self):
        """The only bounce is spent on the hit, so the scattered ray never reaches the sky."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1) == (0.0, 0.0, 0.0)

    def test_mirror_reflects_sky(self):
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        SceneManager().add_metal_sphere((0.0, 0.0, -3.0), 1.0, (0.5, 0.5, 0.5), fuzz=0.0)
        colour = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=2)
        assert colour == pytest.approx(tuple(0.5 * c for c in HORIZON))

    def test_matched_glass_needs_two_bounces(self):
        """A sphere with ior 1 is invisible, but entering and leaving costs two bounces."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        SceneManager().add_dielectric_sphere((0.0, 0.0, -3.0), 1.0, ior=1.0)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=2) == (0.0, 0.0, 0.0)
        colour = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=3)
        assert colour == pytest.approx(HORIZON)

    def test_trapped_path_is_black(self):
        """A path that never escapes runs out of depth and contributes black."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        # Inside a mirror sphere every bounce hits the same sphere again
        scene.add_metal_sphere((0.0, 0.0, 0.0), 10.0, (0.9, 0.9, 0.9), fuzz=0.0)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=20) == (0.0, 0.0, 0.0)

    def test_lambertian_colour_bounded(self):
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        for seed in range(10):
            colour = trace_ray((0.0, 0.0, 0.0), (0.0, -0.1, -1.0), max_depth=50, seed=seed)
            assert all(0.0 <= c <= 1.0 for c in colour)

    def test_same_seed_same_colour(self):
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_material_showcase_scene

        create_material_showcase_scene(SceneManager())
        a = trace_ray((0.0, 0.0, 0.0), (-1.0, 0.0, -1.0), max_depth=50, seed=123)
        b = trace_ray((0.0, 0.0, 0.0), (-1.0, 0.0, -1.0), max_depth=50, seed=123)
        assert a == b


class TestNormalShading:
    """Tests for the normal visualization."""

    def test_front_of_sphere(self):
        from weekend_tracer.core.integrator import shade_normal
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        assert shade_normal((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == pytest.approx((0.5, 0.5, 1.0))

    def test_miss_shows_sky(self):
        from weekend_tracer.core.integrator import shade_normal
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        assert shade_normal((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == pytest.approx(SKY_BLUE)

    def test_ground_faces_up(self):
        from weekend_tracer.core.integrator import shade_normal
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        colour = shade_normal((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert colour == pytest.approx((0.5, 1.0, 0.5), abs=0.01)


class TestAccumulation:
    """Tests for render_rows and render_image."""

    def test_sample_count_accumulates(self):
        from weekend_tracer.core.integrator import get_sample_count_numpy, render_image

        setup_small_render()
        render_image(samples=3)
        render_image(samples=2)
        counts = get_sample_count_numpy()
        assert counts.shape == (6, 8)
        assert np.all(counts == 5)

    def test_empty_scene_sum_stays_within_samples(self):
        from weekend_tracer.core.integrator import get_accumulated_image_numpy, render_image

        setup_small_render()
        render_image(samples=4)
        image = get_accumulated_image_numpy()
        assert image.shape == (6, 8, 3)
        assert np.all(image > 0.0)
        assert np.all(image <= 4.0)
        # The sky is bluer toward the top of the frame
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()

    def test_render_rows_only_touches_range(self):
        from weekend_tracer.core.integrator import get_sample_count_numpy, render_rows

        setup_small_render()
        render_rows(2, 4, samples=1)
        counts = get_sample_count_numpy()
        assert np.all(counts[2:4] == 1)
        assert np.all(counts[:2] == 0)
        assert np.all(counts[4:] == 0)

    def test_empty_row_range_is_noop(self):
        from weekend_tracer.core.integrator import get_sample_count_numpy, render_rows

        setup_small_render()
        render_rows(3, 3, samples=4)
        assert get_sample_count_numpy().sum() == 0

    def test_deterministic_by_seed(self):
        from weekend_tracer.core.integrator import (
            clear_render_target,
            get_accumulated_image_numpy,
            render_image,
        )
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        setup_small_render(16, 9)

        render_image(samples=2, seed=5, max_depth=10)
        first = get_accumulated_image_numpy()
        clear_render_target()
        render_image(samples=2, seed=5, max_depth=10)
        second = get_accumulated_image_numpy()
        clear_render_target()
        render_image(samples=2, seed=6, max_depth=10)
        other = get_accumulated_image_numpy()

        np.testing.assert_array_equal(first, second)
        assert not np.array_equal(first, other)

    def test_row_batches_match_full_render(self):
        from weekend_tracer.core.integrator import (
            clear_render_target,
            get_accumulated_image_numpy,
            render_image,
            render_rows,
        )
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_material_showcase_scene

        create_material_showcase_scene(SceneManager())
        setup_small_render(16, 9)

        render_image(samples=2, seed=9)
        whole = get_accumulated_image_numpy()
        clear_render_target()
        for start in range(0, 9, 4):
            render_rows(start, min(start + 4, 9), samples=2, seed=9)
        np.testing.assert_array_equal(get_accumulated_image_numpy(), whole)

    def test_render_sample_matches_buffer(self):
        from weekend_tracer.core.integrator import (
            get_accumulated_image_numpy,
            render_image,
            render_sample,
        )
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene(SceneManager())
        setup_small_render()
        render_image(samples=1, seed=3, max_depth=8)
        sample = render_sample(5, 2, sample_index=0, seed=3, max_depth=8)
        assert sample == pytest.approx(tuple(get_accumulated_image_numpy()[2, 5]))

    def test_no_nan_or_negative(self):
        from weekend_tracer.core.integrator import get_accumulated_image_numpy, render_image
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_material_showcase_scene

        create_material_showcase_scene(SceneManager())
        setup_small_render(
            16,
            9,
            vfov=20.0,
            lookfrom=(-2.0, 2.0, 1.0),
            lookat=(0.0, 0.0, -1.0),
            defocus_angle=10.0,
            focus_dist=3.4,
        )
        render_image(samples=4, seed=1, max_depth=20)
        image = get_accumulated_image_numpy()
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert np.all(image <= 4.0)


class TestRenderTargetErrors:
    """Tests for error handling."""

    def test_render_without_setup_raises(self):
        from weekend_tracer.core import integrator

        integrator._render_target_initialized[None] = 0
        with pytest.raises(RuntimeError, match="setup_render_target"):
            integrator.render_sample(0, 0)
        with pytest.raises(RuntimeError, match="setup_render_target"):
            integrator.render_image(samples=1)

    @pytest.mark.parametrize("row_start, row_end", [(-1, 2), (3, 2), (0, 7)])
    def test_invalid_row_range(self, row_start, row_end):
        from weekend_tracer.core.integrator import render_rows

        setup_small_render()
        with pytest.raises(ValueError, match="Invalid row range"):
            render_rows(row_start, row_end, samples=1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
