import math
import os
from dataclasses import dataclass
from typing import Optional

import torch as t

device = t.device(os.environ.get("RAYTRACING_DEVICE") or ("cuda" if t.cuda.is_available() else "cpu"))
dtype = t.float64

Triple = tuple[float, float, float]


@dataclass(frozen=True)
class CameraConfig:
    """Immutable camera settings, validated once at construction."""

    image_width: int = 100
    aspect_ratio: float = 1.0
    image_height: Optional[int] = None  # derived from the aspect ratio when unset
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0  # vertical field of view, degrees
    look_from: Triple = (0.0, 0.0, 0.0)
    look_at: Triple = (0.0, 0.0, -1.0)
    vup: Triple = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0  # degrees, <= 0 means pinhole
    focus_dist: float = 10.0
    seed: Optional[int] = None

    def __post_init__(self):
        if self.image_width < 1:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.image_height is not None and self.image_height < 1:
            raise ValueError(f"image_height must be positive, got {self.image_height}")
        if self.image_height is None and self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must lie in (0, 180) degrees, got {self.vfov}")
        if self.focus_dist <= 0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

        view = [f - a for f, a in zip(self.look_from, self.look_at)]
        if math.hypot(*view) == 0.0:
            raise ValueError("look_from and look_at must be distinct points")
        side = (
            self.vup[1] * view[2] - self.vup[2] * view[1],
            self.vup[2] * view[0] - self.vup[0] * view[2],
            self.vup[0] * view[1] - self.vup[1] * view[0],
        )
        if math.hypot(*side) == 0.0:
            raise ValueError("vup must not be parallel to the viewing direction")

    @property
    def height(self) -> int:
        if self.image_height is not None:
            return self.image_height
        return max(1, int(self.image_width / self.aspect_ratio))
