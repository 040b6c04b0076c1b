from typing import Optional, Union

import numpy as np
import torch as t
import torch.nn.functional as F
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from .config import device, dtype


def vec3(x: float, y: float, z: float) -> Float[t.Tensor, "3"]:
    return t.tensor([x, y, z], device=device, dtype=dtype)


def make_generator(seed: Optional[int] = None) -> t.Generator:
    """Random source for one render; seeded when reproducibility matters."""
    generator = t.Generator(device=device)
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


@jaxtyped(typechecker=typechecker)
def degrees_to_radians(degrees: float) -> float:
    return degrees * np.pi / 180.0


@jaxtyped(typechecker=typechecker)
def dot(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (u * v).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def cross(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    return t.linalg.cross(u, v, dim=-1)


@jaxtyped(typechecker=typechecker)
def length_squared(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (v**2).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def length(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return t.sqrt(length_squared(v))


@jaxtyped(typechecker=typechecker)
def unit_vector(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    # Zero-length input has no direction; callers never pass one.
    return F.normalize(v, dim=-1)


@jaxtyped(typechecker=typechecker)
def near_zero(v: Float[t.Tensor, "*batch 3"]) -> Bool[t.Tensor, "*batch"]:
    return (v.abs() < 1e-8).all(dim=-1)


@jaxtyped(typechecker=typechecker)
def reflect(v: Float[t.Tensor, "*batch 3"], n: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    # Reflects vector v around normal n
    return v - 2 * (v * n).sum(dim=-1, keepdim=True) * n


@jaxtyped(typechecker=typechecker)
def refract(
    uv: Float[t.Tensor, "*batch 3"],
    n: Float[t.Tensor, "*batch 3"],
    etai_over_etat: Union[float, Float[t.Tensor, "*batch 1"]],
) -> Float[t.Tensor, "*batch 3"]:
    """Bends unit vector uv through a surface with normal n (Snell's law).

    The result is split into the components perpendicular and parallel to n.
    """
    cos_theta = t.clamp((-uv * n).sum(dim=-1, keepdim=True), max=1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -t.sqrt(t.abs(1.0 - (r_out_perp**2).sum(dim=-1, keepdim=True))) * n
    return r_out_perp + r_out_parallel


@jaxtyped(typechecker=typechecker)
def reflectance(cosine: Float[t.Tensor, "*batch 1"], ref_idx: Float[t.Tensor, "*batch 1"]) -> Float[t.Tensor, "*batch 1"]:
    # Schlick's approximation
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@jaxtyped(typechecker=typechecker)
def random_vector(
    shape: tuple[int, ...],
    low: float = 0.0,
    high: float = 1.0,
    generator: Optional[t.Generator] = None,
) -> Float[t.Tensor, "... 3"]:
    return low + (high - low) * t.rand((*shape, 3), generator=generator, device=device, dtype=dtype)


@jaxtyped(typechecker=typechecker)
def random_in_unit_sphere(shape: tuple[int, ...], generator: Optional[t.Generator] = None) -> Float[t.Tensor, "... 3"]:
    """Uniform points strictly inside the unit ball.

    Rejection sampling: points falling outside the ball are redrawn until
    every sample is accepted.
    """
    p = random_vector(shape, -1.0, 1.0, generator)
    rejected = length_squared(p) >= 1.0
    while rejected.any():
        p[rejected] = random_vector((int(rejected.sum()),), -1.0, 1.0, generator)
        rejected = length_squared(p) >= 1.0
    return p


@jaxtyped(typechecker=typechecker)
def random_unit_vector(shape: tuple[int, ...], generator: Optional[t.Generator] = None) -> Float[t.Tensor, "... 3"]:
    p = random_vector(shape, -1.0, 1.0, generator)
    lensq = length_squared(p)
    rejected = (lensq >= 1.0) | (lensq <= 1e-160)
    while rejected.any():
        p[rejected] = random_vector((int(rejected.sum()),), -1.0, 1.0, generator)
        lensq = length_squared(p)
        rejected = (lensq >= 1.0) | (lensq <= 1e-160)
    return p / t.sqrt(lensq).unsqueeze(-1)


@jaxtyped(typechecker=typechecker)
def random_on_hemisphere(
    normal: Float[t.Tensor, "*batch 3"], generator: Optional[t.Generator] = None
) -> Float[t.Tensor, "*batch 3"]:
    vec = random_unit_vector(tuple(normal.shape[:-1]), generator)
    dot_product = t.sum(vec * normal, dim=-1, keepdim=True)
    return t.where(dot_product > 0, vec, -vec)


@jaxtyped(typechecker=typechecker)
def random_in_unit_disk(shape: tuple[int, ...], generator: Optional[t.Generator] = None) -> Float[t.Tensor, "... 3"]:
    """Uniform points inside the unit disk of the xy-plane (z is always 0)."""
    p = random_vector(shape, -1.0, 1.0, generator)
    p[..., 2] = 0.0
    rejected = length_squared(p) >= 1.0
    while rejected.any():
        redraw = random_vector((int(rejected.sum()),), -1.0, 1.0, generator)
        redraw[:, 2] = 0.0
        p[rejected] = redraw
        rejected = length_squared(p) >= 1.0
    return p
