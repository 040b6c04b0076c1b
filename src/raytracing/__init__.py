"""Monte Carlo path tracer for spheres, batched with torch.

Rays are traced a scanline at a time: every sample ray of the row bounces
through the world together, and each bounce groups the rays by the material
they hit.
"""

from .camera import Camera, sky_color
from .config import CameraConfig, device, dtype
from .hittable import HitRecord, Hittable, HittableList
from .image import PPMWriter, linear_to_gamma, save_image, tensor_to_image, to_rgb8, write_ppm
from .interval import EMPTY, UNIVERSE, Interval
from .materials import Dielectric, Lambertian, Material, Metal
from .ray import Ray
from .sphere import Sphere
from .utils import make_generator, vec3

__version__ = "0.1.0"

__all__ = [
    "Camera",
    "CameraConfig",
    "Dielectric",
    "EMPTY",
    "HitRecord",
    "Hittable",
    "HittableList",
    "Interval",
    "Lambertian",
    "Material",
    "Metal",
    "PPMWriter",
    "Ray",
    "Sphere",
    "UNIVERSE",
    "device",
    "dtype",
    "linear_to_gamma",
    "make_generator",
    "save_image",
    "sky_color",
    "tensor_to_image",
    "to_rgb8",
    "vec3",
    "write_ppm",
]
