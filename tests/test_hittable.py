"""Unit tests for hit records and the world aggregate.

Tests cover:
- Empty records and empty worlds
- Closest hit among overlapping spheres
- Tie breaking by insertion order
- Face orientation of the merged record
- List management (add, clear, len)
"""

import pytest
import torch as t

from raytracing.config import device
from raytracing.hittable import HitRecord, HittableList
from raytracing.interval import Interval
from raytracing.materials import Dielectric, Lambertian, Metal
from raytracing.sphere import Sphere
from raytracing.utils import vec3

EVERYWHERE = Interval(0.001, float("inf"))


class TestHitRecord:
    """Tests for HitRecord helpers."""

    def test_empty_record_misses(self):
        record = HitRecord.empty(4, device=device)
        assert len(record) == 4
        assert not record.hit.any()
        assert (record.material_index == -1).all()
        assert record.materials == []

    def test_set_face_normal_flips_against_ray(self):
        record = HitRecord.empty(2, device=device)
        directions = t.stack([vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0)])
        outward = t.stack([vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 1.0)])
        record.set_face_normal(directions, outward)
        assert record.front_face.tolist() == [True, False]
        assert record.normal.flatten().tolist() == pytest.approx([0.0, 0.0, 1.0, 0.0, 0.0, -1.0])

    def test_select_rows(self, make_record):
        record = make_record((1.0, 2.0, 3.0), (0.0, 1.0, 0.0), n=3)
        record.t[1] = 5.0
        subset = record.select(t.tensor([1, 2], device=device))
        assert len(subset) == 2
        assert subset.t.tolist() == [5.0, 1.0]


class TestHittableList:
    """Tests for the closest-hit sweep over a list of spheres."""

    def test_empty_world_misses_everything(self, make_ray):
        world = HittableList()
        ray = make_ray([[0.0, 0.0, 0.0]] * 2, [[0.0, 0.0, -1.0], [0.0, 1.0, 0.0]])
        record = world.hit(ray, EVERYWHERE)
        assert record.hit.tolist() == [False, False]

    def test_nearest_sphere_wins(self, make_ray):
        """Two overlapping spheres: the nearer one's material is reported."""
        near = Lambertian(vec3(1.0, 0.0, 0.0))
        far = Metal(vec3(0.0, 1.0, 0.0), 0.0)
        world = HittableList(
            [
                Sphere(vec3(0.0, 0.0, -3.0), 1.0, far),
                Sphere(vec3(0.0, 0.0, -2.0), 0.8, near),
            ]
        )
        ray = make_ray([[0.0, 0.0, 0.0]], [[0.0, 0.0, -1.0]])
        record = world.hit(ray, EVERYWHERE)
        assert record.hit.tolist() == [True]
        assert record.t.item() == pytest.approx(1.2)
        assert record.material_at(record.material_index.item()) is near

    @pytest.mark.parametrize("order", [(0, 1), (1, 0)])
    def test_insertion_order_does_not_change_the_winner(self, make_ray, order):
        materials = [Lambertian(vec3(1.0, 0.0, 0.0)), Dielectric(1.5)]
        spheres = [
            Sphere(vec3(0.0, 0.0, -2.0), 0.5, materials[0]),
            Sphere(vec3(0.0, 0.0, -5.0), 0.5, materials[1]),
        ]
        world = HittableList([spheres[i] for i in order])
        ray = make_ray([[0.0, 0.0, 0.0]], [[0.0, 0.0, -1.0]])
        record = world.hit(ray, EVERYWHERE)
        assert record.t.item() == pytest.approx(1.5)
        assert record.material_at(record.material_index.item()) is materials[0]

    def test_tie_goes_to_first_sphere(self, make_ray):
        first = Lambertian(vec3(1.0, 0.0, 0.0))
        second = Lambertian(vec3(0.0, 0.0, 1.0))
        world = HittableList(
            [Sphere(vec3(0.0, 0.0, -2.0), 0.5, first), Sphere(vec3(0.0, 0.0, -2.0), 0.5, second)]
        )
        ray = make_ray([[0.0, 0.0, 0.0]], [[0.0, 0.0, -1.0]])
        record = world.hit(ray, EVERYWHERE)
        assert record.material_at(record.material_index.item()) is first

    def test_per_ray_winners(self, make_ray):
        left = Lambertian(vec3(1.0, 0.0, 0.0))
        right = Lambertian(vec3(0.0, 1.0, 0.0))
        world = HittableList(
            [Sphere(vec3(-1.0, 0.0, -2.0), 0.5, left), Sphere(vec3(1.0, 0.0, -2.0), 0.5, right)]
        )
        ray = make_ray([[-1.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]], [[0.0, 0.0, -1.0]] * 3)
        record = world.hit(ray, EVERYWHERE)
        assert record.hit.tolist() == [True, True, False]
        assert record.material_at(record.material_index[0].item()) is left
        assert record.material_at(record.material_index[1].item()) is right
        assert record.material_index[2].item() == -1

    def test_upper_bound_is_respected(self, make_ray):
        world = HittableList([Sphere(vec3(0.0, 0.0, -10.0), 1.0, Lambertian(vec3(0.5, 0.5, 0.5)))])
        ray = make_ray([[0.0, 0.0, 0.0]], [[0.0, 0.0, -1.0]])
        assert not world.hit(ray, Interval(0.001, 5.0)).hit.any()

    def test_list_management(self):
        world = HittableList()
        assert world.is_empty()
        world.add(Sphere(vec3(0.0, 0.0, 0.0), 1.0, Lambertian(vec3(0.5, 0.5, 0.5))))
        world.add(Sphere(vec3(1.0, 1.0, 1.0), 1.0, Lambertian(vec3(0.5, 0.5, 0.5))))
        assert len(world) == 2
        world.clear()
        assert world.is_empty()
