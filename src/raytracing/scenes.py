"""Ready-made worlds together with the camera settings they were framed for."""

import random
from typing import Callable, Optional

from .config import CameraConfig
from .hittable import HittableList
from .materials import Dielectric, Lambertian, Metal
from .sphere import Sphere
from .utils import vec3

Scene = tuple[HittableList, CameraConfig]


def three_spheres(seed: Optional[int] = None) -> Scene:
    """Diffuse, hollow glass and fuzzy metal spheres on a yellow ground."""
    material_ground = Lambertian(vec3(0.8, 0.8, 0.0))
    material_center = Lambertian(vec3(0.1, 0.2, 0.5))
    material_left = Dielectric(1.50)
    material_bubble = Dielectric(1.00 / 1.50)
    material_right = Metal(vec3(0.8, 0.6, 0.2), 1.0)

    world = HittableList()
    world.add(Sphere(vec3(0.0, -100.5, -1.0), 100.0, material_ground))
    world.add(Sphere(vec3(0.0, 0.0, -1.2), 0.5, material_center))
    world.add(Sphere(vec3(-1.0, 0.0, -1.0), 0.5, material_left))
    world.add(Sphere(vec3(-1.0, 0.0, -1.0), 0.4, material_bubble))
    world.add(Sphere(vec3(1.0, 0.0, -1.0), 0.5, material_right))

    config = CameraConfig(
        image_width=600,
        aspect_ratio=3.0 / 2.0,
        samples_per_pixel=10,
        max_depth=50,
        vfov=20.0,
        look_from=(-2.0, 2.0, 1.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=10.0,
        focus_dist=3.4,
        seed=seed,
    )
    return world, config


def final_scene(seed: Optional[int] = None) -> Scene:
    """Three large spheres among a field of small random ones."""
    rng = random.Random(seed)

    def random_color():
        return vec3(rng.random(), rng.random(), rng.random())

    world = HittableList()

    # Ground sphere
    world.add(Sphere(vec3(0.0, -1000.0, 0.0), 1000.0, Lambertian(vec3(0.5, 0.5, 0.5))))

    # Random small spheres
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = (a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            if (center[0] - 4.0) ** 2 + (center[2] - 0.0) ** 2 <= 0.9**2:
                continue
            if choose_mat < 0.8:
                # Diffuse
                material = Lambertian(random_color() * random_color())
            elif choose_mat < 0.95:
                # Metal
                material = Metal(random_color() * 0.5 + 0.5, rng.uniform(0.0, 0.5))
            else:
                # Glass
                material = Dielectric(1.5)
            world.add(Sphere(vec3(*center), 0.2, material))

    # Three larger spheres
    world.add(Sphere(vec3(0.0, 1.0, 0.0), 1.0, Dielectric(1.5)))
    world.add(Sphere(vec3(-4.0, 1.0, 0.0), 1.0, Lambertian(vec3(0.4, 0.2, 0.1))))
    world.add(Sphere(vec3(4.0, 1.0, 0.0), 1.0, Metal(vec3(0.7, 0.6, 0.5), 0.0)))

    config = CameraConfig(
        image_width=400,
        aspect_ratio=16.0 / 9.0,
        samples_per_pixel=10,
        max_depth=10,
        vfov=20.0,
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
        seed=seed,
    )
    return world, config


SCENES: dict[str, Callable[[Optional[int]], Scene]] = {
    "three-spheres": three_spheres,
    "final": final_scene,
}
