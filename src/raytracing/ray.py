from typing import Union

import torch as t
from jaxtyping import Bool, Float, Int, jaxtyped
from typeguard import typechecked as typechecker


class Ray:
    """A batch of N rays, `origin + t * direction` for each row.

    Directions are not required to be unit length.
    """

    @jaxtyped(typechecker=typechecker)
    def __init__(self, origin: Float[t.Tensor, "N 3"], direction: Float[t.Tensor, "N 3"]):
        self.origin = origin
        self.direction = direction

    @jaxtyped(typechecker=typechecker)
    def at(self, t_param: Union[float, Float[t.Tensor, "N"]]) -> Float[t.Tensor, "N 3"]:
        if isinstance(t_param, t.Tensor):
            t_param = t_param.unsqueeze(-1)
        return self.origin + t_param * self.direction

    def __len__(self) -> int:
        return self.origin.shape[0]

    def __getitem__(self, index: Union[Bool[t.Tensor, "N"], Int[t.Tensor, "M"]]) -> "Ray":
        return Ray(self.origin[index], self.direction[index])

    def __repr__(self) -> str:
        return f"Ray(n={len(self)})"
