from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .materials import Material

import torch as t
from jaxtyping import Bool, Float, Int, jaxtyped
from typeguard import typechecked as typechecker

from .config import dtype
from .interval import Interval
from .ray import Ray


class HitRecord:
    """Class to register ray-object intersections.

    One record covers a whole batch of rays. `hit` tells which rows hold an
    intersection; the other fields are meaningless where it is False.
    `material_index` points into `materials` (-1 on a miss).
    """

    def __init__(
        self,
        hit: Bool[t.Tensor, "N"],
        point: Float[t.Tensor, "N 3"],
        normal: Float[t.Tensor, "N 3"],
        t: Float[t.Tensor, "N"],
        front_face: Bool[t.Tensor, "N"],
        material_index: Int[t.Tensor, "N"],
        materials: Optional[List["Material"]] = None,
    ):
        self.hit = hit
        self.point = point
        self.normal = normal
        self.t = t
        self.front_face = front_face
        self.material_index = material_index
        self.materials = materials if materials is not None else []

    def __len__(self) -> int:
        return self.hit.shape[0]

    @jaxtyped(typechecker=typechecker)
    def set_face_normal(
        self,
        ray_direction: Float[t.Tensor, "N 3"],
        outward_normal: Float[t.Tensor, "N 3"],
    ) -> None:
        """Determines whether the hit is from the outside or inside.

        `outward_normal` is assumed to have unit length; the stored normal
        always points against the incoming ray.
        """
        self.front_face = (ray_direction * outward_normal).sum(dim=-1) < 0
        self.normal = t.where(self.front_face.unsqueeze(-1), outward_normal, -outward_normal)

    def material_at(self, index: int) -> "Material":
        return self.materials[index]

    def select(self, indices: Int[t.Tensor, "M"]) -> "HitRecord":
        """Sub-record holding only the given rows."""
        return HitRecord(
            hit=self.hit[indices],
            point=self.point[indices],
            normal=self.normal[indices],
            t=self.t[indices],
            front_face=self.front_face[indices],
            material_index=self.material_index[indices],
            materials=self.materials,
        )

    @staticmethod
    def empty(n: int, device: t.device) -> "HitRecord":
        """Creates a record in which every ray misses."""
        hit = t.full((n,), False, dtype=t.bool, device=device)
        point = t.zeros((n, 3), dtype=dtype, device=device)
        normal = t.zeros((n, 3), dtype=dtype, device=device)
        t_values = t.full((n,), float("inf"), dtype=dtype, device=device)
        front_face = t.full((n,), False, dtype=t.bool, device=device)
        material_index = t.full((n,), -1, dtype=t.long, device=device)
        return HitRecord(hit, point, normal, t_values, front_face, material_index)


class Hittable(ABC):
    """Abstract class for hittable objects."""

    @abstractmethod
    def hit(self, rays: Ray, ray_t: Interval) -> HitRecord:
        """Intersects every ray with the object inside the interval `ray_t`."""


class HittableList(Hittable):
    """List of hittable objects; answers with the closest hit per ray."""

    def __init__(self, objects: Optional[List[Hittable]] = None):
        self.objects: List[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        self.objects.append(obj)

    def clear(self) -> None:
        self.objects.clear()

    def is_empty(self) -> bool:
        return len(self.objects) == 0

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def hit(self, rays: Ray, ray_t: Interval) -> HitRecord:
        N: int = len(rays)
        record: HitRecord = HitRecord.empty(N, device=rays.origin.device)
        closest_so_far: Float[t.Tensor, "N"] = t.broadcast_to(
            t.as_tensor(ray_t.max, dtype=dtype, device=rays.origin.device), (N,)
        ).clone()

        for obj in self.objects:
            # Narrowing the upper bound means only a strictly closer hit can win.
            obj_record: HitRecord = obj.hit(rays, Interval(ray_t.min, closest_so_far))
            closer_mask: Bool[t.Tensor, "N"] = obj_record.hit
            closest_so_far = t.where(closer_mask, obj_record.t, closest_so_far)

            record.hit = record.hit | closer_mask
            record.point = t.where(closer_mask.unsqueeze(-1), obj_record.point, record.point)
            record.normal = t.where(closer_mask.unsqueeze(-1), obj_record.normal, record.normal)
            record.t = t.where(closer_mask, obj_record.t, record.t)
            record.front_face = t.where(closer_mask, obj_record.front_face, record.front_face)

            offset = len(record.materials)
            record.materials.extend(obj_record.materials)
            record.material_index = t.where(closer_mask, obj_record.material_index + offset, record.material_index)

        return record
