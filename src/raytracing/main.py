"""Render one of the bundled scenes.

Usage:
    python -m raytracing [options]

Example:
    python -m raytracing --scene final --width 200 --samples 20 --output final.png
"""

import argparse
import dataclasses
import sys
from typing import Optional, Sequence

from loguru import logger

from .camera import Camera
from .config import device
from .image import PPMWriter, save_image
from .scenes import SCENES

# Command-line flag -> CameraConfig field
OVERRIDES = {
    "width": "image_width",
    "height": "image_height",
    "aspect_ratio": "aspect_ratio",
    "samples": "samples_per_pixel",
    "max_depth": "max_depth",
    "vfov": "vfov",
    "look_from": "look_from",
    "look_at": "look_at",
    "vup": "vup",
    "defocus_angle": "defocus_angle",
    "focus_dist": "focus_dist",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="raytracing",
        description="Render a sphere scene with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=sorted(SCENES), default="three-spheres", help="Scene preset")
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--height", type=int, help="Image height in pixels (default: from aspect ratio)")
    parser.add_argument("--aspect-ratio", type=float, help="Width divided by height")
    parser.add_argument("--samples", type=int, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, help="Maximum number of bounces")
    parser.add_argument("--vfov", type=float, help="Vertical field of view in degrees")
    parser.add_argument("--look-from", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Camera position")
    parser.add_argument("--look-at", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Point the camera looks at")
    parser.add_argument("--vup", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Camera up direction")
    parser.add_argument("--defocus-angle", type=float, help="Aperture angle in degrees (0 for a pinhole)")
    parser.add_argument("--focus-dist", type=float, help="Distance to the plane of perfect focus")
    parser.add_argument("--seed", type=int, help="Seed for the scene layout and the sampler")
    parser.add_argument(
        "--output",
        default="-",
        help="Output path; .ppm is written as ASCII PPM, other suffixes through PIL (default: PPM on stdout)",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and hide the progress bar")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="WARNING" if args.quiet else "INFO")
    logger.info(f"Using device: {device}")

    world, config = SCENES[args.scene](args.seed)
    overrides = {}
    for flag, field in OVERRIDES.items():
        value = getattr(args, flag)
        if value is not None:
            overrides[field] = tuple(value) if isinstance(value, list) else value
    try:
        config = dataclasses.replace(config, **overrides)
    except ValueError as err:
        parser.error(str(err))

    logger.info(f"Scene '{args.scene}' with {len(world)} spheres")
    camera = Camera(config)

    if args.output == "-":
        camera.render(world, sink=PPMWriter(sys.stdout), progress=not args.quiet)
        sys.stdout.flush()
    else:
        image = camera.render(world, progress=not args.quiet)
        save_image(image, args.output)
        logger.info(f"Saved {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
