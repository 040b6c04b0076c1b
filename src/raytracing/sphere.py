import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from .config import device, dtype
from .hittable import HitRecord, Hittable
from .interval import Interval
from .materials import Material
from .ray import Ray


class Sphere(Hittable):
    @jaxtyped(typechecker=typechecker)
    def __init__(self, center: Float[t.Tensor, "3"], radius: float, material: Material):
        self.center: Float[t.Tensor, "3"] = center.to(device=device, dtype=dtype)
        self.radius: float = max(float(radius), 0.0)
        self.material: Material = material

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius}, material={self.material!r})"

    def hit(self, rays: Ray, ray_t: Interval) -> HitRecord:
        N: int = len(rays)
        record: HitRecord = HitRecord.empty(N, device=rays.origin.device)
        record.materials = [self.material]

        origin: Float[t.Tensor, "N 3"] = rays.origin
        directions: Float[t.Tensor, "N 3"] = rays.direction

        oc: Float[t.Tensor, "N 3"] = self.center - origin

        # Solve a t^2 - 2 h t + c = 0 with h = dot(direction, center - origin)
        a: Float[t.Tensor, "N"] = (directions**2).sum(dim=1)
        h: Float[t.Tensor, "N"] = (directions * oc).sum(dim=1)
        c: Float[t.Tensor, "N"] = (oc**2).sum(dim=1) - self.radius**2

        discriminant: Float[t.Tensor, "N"] = h**2 - a * c
        sphere_hit: Bool[t.Tensor, "N"] = discriminant >= 0
        sqrtd: Float[t.Tensor, "N"] = t.sqrt(discriminant.clamp(min=0.0))

        # Prefer the nearer root, fall back to the farther one
        t0: Float[t.Tensor, "N"] = (h - sqrtd) / a
        t1: Float[t.Tensor, "N"] = (h + sqrtd) / a
        t0_valid: Bool[t.Tensor, "N"] = sphere_hit & ray_t.surrounds(t0)
        t1_valid: Bool[t.Tensor, "N"] = sphere_hit & ray_t.surrounds(t1)
        sphere_hit = t0_valid | t1_valid
        if not sphere_hit.any():
            return record

        t_hit: Float[t.Tensor, "N"] = t.where(t0_valid, t0, t1)
        hit_points: Float[t.Tensor, "N 3"] = rays.at(t_hit)
        outward_normal: Float[t.Tensor, "N 3"] = (hit_points - self.center) / self.radius

        # Update the record
        mask = sphere_hit.unsqueeze(-1)
        record.hit = sphere_hit
        record.t = t.where(sphere_hit, t_hit, record.t)
        record.point = t.where(mask, hit_points, record.point)
        record.set_face_normal(directions, t.where(mask, outward_normal, record.normal))
        record.material_index = t.where(sphere_hit, 0, record.material_index)
        return record
