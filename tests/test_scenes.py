"""Tests for the bundled scene presets.

Tests cover:
- Three-spheres layout and camera framing
- Seeded, reproducible random final scene
- Preset registry
"""

import pytest

from raytracing.config import CameraConfig
from raytracing.hittable import HittableList
from raytracing.materials import Dielectric, Lambertian, Metal
from raytracing.scenes import SCENES, final_scene, three_spheres
from raytracing.sphere import Sphere


class TestThreeSpheres:
    """Tests for the default scene."""

    def test_layout(self):
        world, config = three_spheres()
        assert isinstance(world, HittableList)
        assert len(world) == 5
        assert all(isinstance(obj, Sphere) for obj in world)
        ground = world.objects[0]
        assert ground.radius == 100.0
        assert isinstance(ground.material, Lambertian)

    def test_hollow_glass_sphere(self):
        world, _ = three_spheres()
        outer, bubble = world.objects[2], world.objects[3]
        assert outer.center.tolist() == bubble.center.tolist()
        assert bubble.radius < outer.radius
        assert isinstance(outer.material, Dielectric)
        assert bubble.material.refraction_index == pytest.approx(1.0 / 1.5)

    def test_camera(self):
        _, config = three_spheres(seed=4)
        assert isinstance(config, CameraConfig)
        assert config.image_width == 600
        assert config.height == 400
        assert config.max_depth == 50
        assert config.seed == 4
        assert config.defocus_angle > 0


class TestFinalScene:
    """Tests for the random sphere field."""

    def test_seeded_layout_is_reproducible(self):
        first, _ = final_scene(seed=3)
        second, _ = final_scene(seed=3)
        assert [repr(obj) for obj in first] == [repr(obj) for obj in second]

    def test_different_seeds_differ(self):
        first, _ = final_scene(seed=3)
        second, _ = final_scene(seed=4)
        assert [repr(obj) for obj in first] != [repr(obj) for obj in second]

    def test_contents(self):
        world, config = final_scene(seed=0)
        kinds = {type(obj.material) for obj in world}
        assert kinds == {Lambertian, Metal, Dielectric}
        large = [obj for obj in world if obj.radius == 1.0]
        assert len(large) == 3
        small = [obj for obj in world if obj.radius == 0.2]
        assert len(world) == 1 + len(large) + len(small)
        assert all(0.0 <= obj.material.fuzz <= 0.5 for obj in small if isinstance(obj.material, Metal))
        assert config.look_from == (13.0, 2.0, 3.0)


def test_registry():
    assert set(SCENES) == {"three-spheres", "final"}
    for build in SCENES.values():
        world, config = build(1)
        assert len(world) > 0
        assert config.seed == 1
