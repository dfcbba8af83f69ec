"""Tests for the preset scenes and their cameras."""

import pytest


class TestPresetScenes:
    """Tests for the scene builders."""

    def test_two_spheres(self):
        from weekend_tracer.scene.manager import MaterialType, SceneManager
        from weekend_tracer.scene.presets import create_two_sphere_scene

        scene = create_two_sphere_scene(SceneManager())
        assert scene.get_sphere_count() == 2
        assert scene.spheres[0].center == (0.0, -100.5, -1.0)
        assert scene.spheres[0].radius == 100.0
        assert scene.spheres[1].center == (0.0, 0.0, -1.0)
        assert all(
            info.material_type == MaterialType.LAMBERTIAN for info in scene.materials
        )

    def test_showcase_hollow_glass(self):
        from weekend_tracer.scene.manager import MaterialType, SceneManager
        from weekend_tracer.scene.presets import create_material_showcase_scene

        scene = create_material_showcase_scene(SceneManager())
        assert scene.get_sphere_count() == 5
        assert scene.get_material_count() == 4

        shell = [s for s in scene.spheres if s.center == (-1.0, 0.0, -1.0)]
        assert sorted(s.radius for s in shell) == [-0.4, 0.5]
        assert shell[0].material_id == shell[1].material_id
        glass = scene.get_material_info(shell[0].material_id)
        assert glass.material_type == MaterialType.DIELECTRIC
        assert glass.params["ior"] == 1.5

    def test_builder_clears_previous_scene(self):
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import (
            create_material_showcase_scene,
            create_two_sphere_scene,
        )

        scene = SceneManager()
        create_material_showcase_scene(scene)
        create_two_sphere_scene(scene)
        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 2

    def test_random_spheres_reproducible(self):
        from weekend_tracer.scene.manager import SceneManager
        from weekend_tracer.scene.presets import create_random_spheres_scene

        first = create_random_spheres_scene(SceneManager(), seed=7).to_dict()
        second = create_random_spheres_scene(SceneManager(), seed=7).to_dict()
        other = create_random_spheres_scene(SceneManager(), seed=8).to_dict()
        assert first == second
        assert first != other

    def test_random_spheres_layout(self):
        import numpy as np

        from weekend_tracer.scene.manager import MaterialType, SceneManager
        from weekend_tracer.scene.presets import (
            FEATURE_CLEARANCE,
            FEATURE_CLEARANCE_POINT,
            create_random_spheres_scene,
        )

        scene = create_random_spheres_scene(SceneManager(), seed=0)
        # Ground, at most 22 x 22 small spheres, three large ones
        assert 4 < scene.get_sphere_count() <= 1 + 22 * 22 + 3

        small = [s for s in scene.spheres if s.radius == 0.2]
        for sphere in small:
            assert sphere.center[1] == 0.2
            distance = np.linalg.norm(np.array(sphere.center) - FEATURE_CLEARANCE_POINT)
            assert distance > FEATURE_CLEARANCE

        large = scene.spheres[-3:]
        assert [s.center for s in large] == [(0.0, 1.0, 0.0), (-4.0, 1.0, 0.0), (4.0, 1.0, 0.0)]
        types = [scene.get_material_type_python(s.material_id) for s in large]
        assert types == [MaterialType.DIELECTRIC, MaterialType.LAMBERTIAN, MaterialType.METAL]

        for info in scene.materials:
            if info.material_type == MaterialType.METAL:
                assert 0.0 <= info.params["fuzz"] <= 0.5

    def test_presets_registry(self):
        from weekend_tracer.scene.presets import PRESETS

        assert set(PRESETS) == {"two_spheres", "showcase", "random_spheres"}


class TestPresetCameras:
    """Tests for camera_for_preset."""

    def test_two_spheres_camera(self):
        from weekend_tracer.scene.presets import camera_for_preset

        camera = camera_for_preset("two_spheres")
        assert camera.image_width == 400
        assert camera.image_height == 225
        assert camera.samples_per_pixel == 100
        assert camera.max_depth == 50
        assert camera.defocus_angle == 0.0

    def test_random_spheres_camera(self):
        from weekend_tracer.scene.presets import camera_for_preset

        camera = camera_for_preset("random_spheres")
        assert camera.image_width == 1200
        assert camera.samples_per_pixel == 500
        assert camera.vfov == 20.0
        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.defocus_angle == 0.6
        assert camera.focus_dist == 10.0

    def test_overrides(self):
        from weekend_tracer.scene.presets import camera_for_preset

        camera = camera_for_preset(
            "showcase", image_width=100, samples_per_pixel=4, max_depth=5, aspect_ratio=1.0
        )
        assert camera.image_width == 100
        assert camera.image_height == 100
        assert camera.samples_per_pixel == 4
        assert camera.max_depth == 5
        assert camera.focus_dist == 3.4
        assert camera.lookfrom == (-2.0, 2.0, 1.0)

    def test_overrides_do_not_leak(self):
        from weekend_tracer.scene.presets import camera_for_preset

        camera_for_preset("showcase", image_width=10)
        assert camera_for_preset("showcase").image_width == 400

    def test_unknown_preset(self):
        from weekend_tracer.scene.presets import camera_for_preset

        with pytest.raises(ValueError, match="Unknown scene preset"):
            camera_for_preset("cornell")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
