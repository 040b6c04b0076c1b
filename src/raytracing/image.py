from pathlib import Path
from typing import TextIO, Union

import numpy as np
import torch as t
from jaxtyping import Float, UInt8, jaxtyped
from PIL import Image
from typeguard import typechecked as typechecker

from .interval import Interval

# Quantization keeps channels strictly below 1.0 so 255.999 * c never reaches 256.
INTENSITY = Interval(0.000, 0.999)


@jaxtyped(typechecker=typechecker)
def linear_to_gamma(linear_component: Float[t.Tensor, "*batch"]) -> Float[t.Tensor, "*batch"]:
    # Gamma 2: square root of positive components, zero otherwise
    return t.where(linear_component > 0, t.sqrt(linear_component.clamp(min=0.0)), 0.0)


@jaxtyped(typechecker=typechecker)
def to_rgb8(colors: Float[t.Tensor, "*batch 3"]) -> UInt8[t.Tensor, "*batch 3"]:
    """Gamma corrects linear colors and quantizes them to 8-bit channels."""
    clamped = INTENSITY.clamp(linear_to_gamma(colors))
    return (255.999 * clamped).to(t.uint8)


class PPMWriter:
    """Writes an ASCII PPM (P3) image one scanline at a time."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def write_header(self, width: int, height: int) -> None:
        self.stream.write(f"P3\n{width} {height}\n255\n")

    @jaxtyped(typechecker=typechecker)
    def write_row(self, pixels: UInt8[t.Tensor, "w 3"]) -> None:
        self.stream.write("".join(f"{r} {g} {b}\n" for r, g, b in pixels.cpu().tolist()))

    def write_pixel(self, r: int, g: int, b: int) -> None:
        self.stream.write(f"{r} {g} {b}\n")


@jaxtyped(typechecker=typechecker)
def write_ppm(stream: TextIO, image: UInt8[t.Tensor, "h w 3"]) -> None:
    h, w, _ = image.shape
    writer = PPMWriter(stream)
    writer.write_header(w, h)
    for row in image:
        writer.write_row(row)


@jaxtyped(typechecker=typechecker)
def tensor_to_image(tensor: UInt8[t.Tensor, "h w 3"]) -> Image.Image:
    array = tensor.cpu().numpy().astype(np.uint8)
    return Image.fromarray(array)


def save_image(image: UInt8[t.Tensor, "h w 3"], path: Union[str, Path]) -> None:
    """Saves as PPM when the suffix is .ppm, otherwise through PIL."""
    path = Path(path)
    if path.suffix.lower() == ".ppm":
        with path.open("w", encoding="ascii") as stream:
            write_ppm(stream, image)
    else:
        tensor_to_image(image).save(path)
