from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .hittable import HitRecord
import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from .config import device, dtype
from .ray import Ray
from .utils import near_zero, random_in_unit_sphere, random_unit_vector, reflect, reflectance, refract, unit_vector

ScatterResult = tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]


class Material(ABC):
    """Scattering model of a surface.

    `scatter` answers, for every ray of the batch, whether it keeps
    travelling, the attenuation color and the outgoing ray. Rays whose flag
    is False were absorbed.
    """

    @abstractmethod
    def scatter(
        self,
        r_in: Ray,
        hit_record: "HitRecord",
        generator: Optional[t.Generator] = None,
    ) -> ScatterResult:
        pass


class Lambertian(Material):
    @jaxtyped(typechecker=typechecker)
    def __init__(self, albedo: Float[t.Tensor, "3"]):
        self.albedo = albedo.to(device=device, dtype=dtype)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo.tolist()})"

    def scatter(
        self,
        r_in: Ray,
        hit_record: "HitRecord",
        generator: Optional[t.Generator] = None,
    ) -> ScatterResult:
        N = len(r_in)
        normals = hit_record.normal
        points = hit_record.point

        # Generate scatter direction
        scatter_direction = normals + random_unit_vector((N,), generator)

        # Handle degenerate scatter direction
        zero_mask = near_zero(scatter_direction)
        scatter_direction = t.where(zero_mask.unsqueeze(-1), normals, scatter_direction)

        # Attenuation is the albedo
        attenuation = self.albedo.expand(N, 3)

        scatter_mask = t.ones(N, dtype=t.bool, device=points.device)

        return scatter_mask, attenuation, Ray(points, scatter_direction)


class Metal(Material):
    @jaxtyped(typechecker=typechecker)
    def __init__(self, albedo: Float[t.Tensor, "3"], fuzz: float = 0.3):
        self.albedo = albedo.to(device=device, dtype=dtype)
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo.tolist()}, fuzz={self.fuzz})"

    def scatter(
        self,
        r_in: Ray,
        hit_record: "HitRecord",
        generator: Optional[t.Generator] = None,
    ) -> ScatterResult:
        N = len(r_in)
        normals = hit_record.normal  # Shape: [N, 3]
        points = hit_record.point  # Shape: [N, 3]

        # Generate reflected directions
        reflected_direction = unit_vector(reflect(r_in.direction, normals))
        reflected_direction = reflected_direction + self.fuzz * random_in_unit_sphere((N,), generator)

        # Reflections that dip below the surface are kept, not absorbed.
        scatter_mask = t.ones(N, dtype=t.bool, device=points.device)

        # Attenuation is the albedo
        attenuation = self.albedo.expand(N, 3)  # Shape: [N, 3]

        return scatter_mask, attenuation, Ray(points, reflected_direction)


class Dielectric(Material):
    @jaxtyped(typechecker=typechecker)
    def __init__(self, refraction_index: float):
        self.refraction_index = float(refraction_index)

    def __repr__(self) -> str:
        return f"Dielectric(refraction_index={self.refraction_index})"

    def scatter(
        self,
        r_in: Ray,
        hit_record: "HitRecord",
        generator: Optional[t.Generator] = None,
    ) -> ScatterResult:
        N = len(r_in)
        normals = hit_record.normal  # Shape: [N, 3]
        points = hit_record.point  # Shape: [N, 3]
        front_face = hit_record.front_face  # Shape: [N], dtype: bool
        unit_direction = unit_vector(r_in.direction)  # Shape: [N, 3]

        # Attenuation is always (1, 1, 1) for dielectric materials
        attenuation = t.ones(N, 3, dtype=dtype, device=points.device)  # Shape: [N, 3]

        # Entering the medium divides by the index, leaving uses it as-is
        refraction_ratio = t.where(
            front_face.unsqueeze(1),
            t.full((N, 1), 1.0 / self.refraction_index, dtype=dtype, device=points.device),
            t.full((N, 1), self.refraction_index, dtype=dtype, device=points.device),
        )

        cos_theta = t.clamp((-unit_direction * normals).sum(dim=1, keepdim=True), max=1.0)
        sin_theta = t.sqrt(t.clamp(1.0 - cos_theta**2, min=0.0))

        cannot_refract = (refraction_ratio * sin_theta) > 1.0

        # Generate random numbers to decide between reflection and refraction
        reflect_prob = reflectance(cos_theta, refraction_ratio)
        random_numbers = t.rand((N, 1), generator=generator, dtype=dtype, device=points.device)
        should_reflect = cannot_refract | (reflect_prob > random_numbers)

        # Compute reflected and refracted directions
        reflected_direction = reflect(unit_direction, normals)
        refracted_direction = refract(unit_direction, normals, refraction_ratio)
        direction = t.where(should_reflect.expand(-1, 3), reflected_direction, refracted_direction)

        # Scatter mask is always True for dielectric materials
        scatter_mask = t.ones(N, dtype=t.bool, device=points.device)

        return scatter_mask, attenuation, Ray(points, direction)
