import math
import sys
from typing import Optional, Protocol

import torch as t
from jaxtyping import Float, UInt8, jaxtyped
from loguru import logger
from tqdm import tqdm
from typeguard import typechecked as typechecker

from .config import CameraConfig, device, dtype
from .hittable import Hittable
from .image import to_rgb8
from .interval import Interval
from .ray import Ray
from .utils import cross, degrees_to_radians, make_generator, random_in_unit_disk, unit_vector

# Lower bound of valid hit distances; keeps scattered rays off their own surface.
T_MIN = 1e-3

WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


class PixelSink(Protocol):
    def write_header(self, width: int, height: int) -> None: ...

    def write_row(self, pixels: UInt8[t.Tensor, "w 3"]) -> None: ...


@jaxtyped(typechecker=typechecker)
def sky_color(directions: Float[t.Tensor, "N 3"]) -> Float[t.Tensor, "N 3"]:
    """Background gradient, white at the bottom to sky blue at the top."""
    unit_directions = unit_vector(directions)
    a = 0.5 * (unit_directions[:, 1] + 1.0)
    white = t.tensor(WHITE, dtype=dtype, device=directions.device)
    blue = t.tensor(SKY_BLUE, dtype=dtype, device=directions.device)
    return (1.0 - a).unsqueeze(-1) * white + a.unsqueeze(-1) * blue


class Camera:
    def __init__(self, config: Optional[CameraConfig] = None, generator: Optional[t.Generator] = None):
        config = config if config is not None else CameraConfig()
        self.config = config
        self.generator = generator if generator is not None else make_generator(config.seed)

        self.samples_per_pixel: int = config.samples_per_pixel
        self.pixel_samples_scale: float = 1.0 / config.samples_per_pixel
        self.max_depth: int = config.max_depth

        self.defocus_angle: float = config.defocus_angle
        self.focus_dist: float = config.focus_dist

        self.image_width: int = config.image_width
        self.image_height: int = config.height
        h, w = self.image_height, self.image_width

        self.look_from: Float[t.Tensor, "3"] = t.tensor(config.look_from, dtype=dtype, device=device)
        self.look_at: Float[t.Tensor, "3"] = t.tensor(config.look_at, dtype=dtype, device=device)
        self.vup: Float[t.Tensor, "3"] = t.tensor(config.vup, dtype=dtype, device=device)
        self.center: Float[t.Tensor, "3"] = self.look_from

        # Compute viewport dimensions
        theta: float = degrees_to_radians(config.vfov)
        h_viewport: float = math.tan(theta / 2)
        self.viewport_height: float = 2.0 * h_viewport * self.focus_dist
        self.viewport_width: float = self.viewport_height * (w / h)

        # Calculate camera basis vectors
        self.w: Float[t.Tensor, "3"] = unit_vector(self.look_from - self.look_at)
        self.u: Float[t.Tensor, "3"] = unit_vector(cross(self.vup, self.w))
        self.v: Float[t.Tensor, "3"] = cross(self.w, self.u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u: Float[t.Tensor, "3"] = self.viewport_width * self.u
        viewport_v: Float[t.Tensor, "3"] = self.viewport_height * -self.v

        # Pixel-to-pixel steps
        self.pixel_delta_u: Float[t.Tensor, "3"] = viewport_u / w
        self.pixel_delta_v: Float[t.Tensor, "3"] = viewport_v / h

        # Center of the upper-left pixel
        viewport_upper_left: Float[t.Tensor, "3"] = (
            self.center - self.focus_dist * self.w - viewport_u / 2 - viewport_v / 2
        )
        self.pixel00_loc: Float[t.Tensor, "3"] = viewport_upper_left + 0.5 * (self.pixel_delta_u + self.pixel_delta_v)

        # Calculate the camera defocus disk basis vectors
        defocus_radius: float = self.focus_dist * math.tan(degrees_to_radians(self.defocus_angle / 2))
        self.defocus_disk_u: Float[t.Tensor, "3"] = self.u * defocus_radius
        self.defocus_disk_v: Float[t.Tensor, "3"] = self.v * defocus_radius

    def sample_square(self, shape: tuple[int, ...]) -> Float[t.Tensor, "... 2"]:
        """Random pixel offsets in the [-0.5, 0.5) x [-0.5, 0.5) square."""
        return t.rand((*shape, 2), generator=self.generator, dtype=dtype, device=device) - 0.5

    def defocus_disk_sample(self, shape: tuple[int, ...]) -> Float[t.Tensor, "... 3"]:
        """Random ray origins on the camera's defocus disk."""
        p = random_in_unit_disk(shape, self.generator)
        return self.center + p[..., 0:1] * self.defocus_disk_u + p[..., 1:2] * self.defocus_disk_v

    def get_rays(self, j: int) -> Ray:
        """All sample rays of scanline j, grouped pixel by pixel.

        Row i * samples_per_pixel + s is sample s of pixel (i, j).
        """
        w, samples = self.image_width, self.samples_per_pixel
        i_indices = t.arange(w, dtype=dtype, device=device).view(w, 1, 1)

        offset = self.sample_square((w, samples))
        pixel_samples: Float[t.Tensor, "w samples 3"] = (
            self.pixel00_loc
            + (i_indices + offset[..., 0:1]) * self.pixel_delta_u
            + (j + offset[..., 1:2]) * self.pixel_delta_v
        )

        if self.defocus_angle <= 0:
            ray_origin = self.center.expand(w, samples, 3)
        else:
            ray_origin = self.defocus_disk_sample((w, samples))

        directions = pixel_samples - ray_origin
        return Ray(ray_origin.reshape(-1, 3), directions.reshape(-1, 3))

    @jaxtyped(typechecker=typechecker)
    def ray_color(self, rays: Ray, world: Hittable) -> Float[t.Tensor, "N 3"]:
        """Light carried back along each ray.

        Iterates bounce by bounce, keeping the product of attenuations. A ray
        ends on a miss (sky color), on absorption (black) or when it hits
        something after `max_depth` scatters (black).
        """
        N = len(rays)
        colors = t.zeros((N, 3), dtype=dtype, device=device)
        attenuation = t.ones((N, 3), dtype=dtype, device=device)
        origins = rays.origin.clone()
        directions = rays.direction.clone()
        active_mask = t.ones(N, dtype=t.bool, device=device)

        for depth in range(self.max_depth + 1):
            active = active_mask.nonzero(as_tuple=False).squeeze(-1)
            if active.numel() == 0:
                break

            hit_record = world.hit(Ray(origins[active], directions[active]), Interval(T_MIN, math.inf))

            # Handle rays that did not hit anything
            missed = active[~hit_record.hit]
            if missed.numel() > 0:
                colors[missed] = attenuation[missed] * sky_color(directions[missed])
                active_mask[missed] = False

            hit_rows = hit_record.hit.nonzero(as_tuple=False).squeeze(-1)
            if hit_rows.numel() == 0:
                break
            if depth == self.max_depth:
                # No bounces left: the remaining rays contribute nothing
                active_mask[active[hit_rows]] = False
                break

            # Process scattering for each material
            material_index = hit_record.material_index[hit_rows]
            for index in t.unique(material_index).tolist():
                rows = hit_rows[material_index == index]
                indices = active[rows]
                material = hit_record.material_at(index)

                scatter_mask, mat_attenuation, scattered = material.scatter(
                    Ray(origins[indices], directions[indices]), hit_record.select(rows), self.generator
                )

                attenuation[indices] *= mat_attenuation
                origins[indices] = scattered.origin
                directions[indices] = scattered.direction

                # Absorbed rays stay black
                absorbed = indices[~scatter_mask]
                active_mask[absorbed] = False

        return colors

    def render_scanline(self, j: int, world: Hittable) -> Float[t.Tensor, "w 3"]:
        """Averaged linear color of every pixel in scanline j."""
        colors = self.ray_color(self.get_rays(j), world)
        return colors.view(self.image_width, self.samples_per_pixel, 3).sum(dim=1) * self.pixel_samples_scale

    def render(self, world: Hittable, sink: Optional[PixelSink] = None, progress: bool = True) -> UInt8[t.Tensor, "h w 3"]:
        """Renders the world top-to-bottom, left-to-right.

        Each finished scanline is gamma corrected, quantized and handed to
        `sink` before the next one starts. The whole image is also returned.
        """
        h, w = self.image_height, self.image_width
        logger.info(f"Rendering {w}x{h} with {self.samples_per_pixel} samples per pixel, max depth {self.max_depth}")

        if sink is not None:
            sink.write_header(w, h)

        image = t.zeros((h, w, 3), dtype=t.uint8, device=device)
        with tqdm(total=h, desc="Scanlines", unit="line", file=sys.stderr, disable=not progress) as bar:
            for j in range(h):
                bar.set_postfix(remaining=h - j)
                row = to_rgb8(self.render_scanline(j, world))
                image[j] = row
                if sink is not None:
                    sink.write_row(row)
                bar.update(1)

        logger.info("Done.")
        return image
