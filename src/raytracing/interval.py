import math
from typing import Union

import torch as t
from jaxtyping import Float

Bound = Union[float, Float[t.Tensor, "*batch"]]


class Interval:
    """Numeric range used for valid hit distances and color clamping.

    Bounds may be plain floats or per-ray tensors; the comparisons broadcast
    so a whole batch of rays can be tested against its own upper bound.
    `min <= max` is the caller's responsibility.
    """

    def __init__(self, min: Bound = math.inf, max: Bound = -math.inf):
        self.min = min
        self.max = max

    def size(self) -> Bound:
        return self.max - self.min

    def contains(self, x):
        return (self.min <= x) & (x <= self.max)

    def surrounds(self, x):
        return (self.min < x) & (x < self.max)

    def clamp(self, x):
        if isinstance(x, t.Tensor):
            return t.clamp(x, self.min, self.max)
        if x < self.min:
            return self.min
        if x > self.max:
            return self.max
        return x

    def __repr__(self) -> str:
        return f"Interval({self.min!r}, {self.max!r})"


EMPTY = Interval(math.inf, -math.inf)
UNIVERSE = Interval(-math.inf, math.inf)
