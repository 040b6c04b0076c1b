"""Pytest configuration for raytracer tests.

Provides a seeded random source so every test that samples is
reproducible, plus small helpers for building rays and hit records.
"""

import pytest
import torch as t

from raytracing.config import device, dtype
from raytracing.hittable import HitRecord
from raytracing.ray import Ray
from raytracing.utils import make_generator


@pytest.fixture
def generator():
    """Seeded generator for sampling tests."""
    return make_generator(42)


@pytest.fixture
def make_ray():
    """Build a batch of rays from lists of origins and directions."""

    def _make_ray(origins, directions):
        return Ray(
            t.tensor(origins, dtype=dtype, device=device).reshape(-1, 3),
            t.tensor(directions, dtype=dtype, device=device).reshape(-1, 3),
        )

    return _make_ray


@pytest.fixture
def make_record():
    """Build a hit record for N identical hits at a point with a given normal."""

    def _make_record(point, normal, n=1, front_face=True):
        record = HitRecord.empty(n, device=device)
        record.hit[:] = True
        record.t[:] = 1.0
        record.point[:] = t.tensor(point, dtype=dtype, device=device)
        record.normal[:] = t.tensor(normal, dtype=dtype, device=device)
        record.front_face[:] = front_face
        record.material_index[:] = 0
        return record

    return _make_record
