# kestrel/texture/software.py
"""
NumPy versions of the converter's fragment stages.

Each kernel takes and returns float32 RGBA shaped (..., 4) and follows
convert.frag operation for operation, so the software backend and the GPU
agree to float precision.
"""

from __future__ import annotations

import numpy as np

from kestrel.texture.formats import ImageFormat, decode_pixels, encode_pixels
from kestrel.texture.options import (
    ConversionOptions,
    ConvertPipeline,
    ImageConvertOptions,
)


def convert_generic(pixels: np.ndarray, options: ConversionOptions) -> np.ndarray:
    if options.input_unorm and options.output_snorm:
        return pixels * 2.0 - 1.0
    if options.input_snorm and options.output_unorm:
        return pixels * 0.5 + 0.5
    return pixels


def reconstruct_z(pixels: np.ndarray, options: ConversionOptions) -> np.ndarray:
    xy = pixels[..., :2].astype(np.float32)
    if options.input_unorm:
        xy = xy * 2.0 - 1.0

    z = np.sqrt(np.maximum(0.0, 1.0 - np.sum(xy * xy, axis=-1)))
    normal = np.concatenate([xy, z[..., None]], axis=-1)

    # Zero-length input yields NaN, same as GLSL normalize().
    with np.errstate(invalid="ignore", divide="ignore"):
        normal = normal / np.linalg.norm(normal, axis=-1, keepdims=True)

    if options.invert_y:
        normal[..., 1] = -normal[..., 1]

    if options.output_unorm:
        normal = normal * 0.5 + 0.5

    alpha = np.ones(normal.shape[:-1] + (1,), dtype=np.float32)
    return np.concatenate([normal, alpha], axis=-1).astype(np.float32)


def scale_bias(pixels: np.ndarray, options: ConversionOptions) -> np.ndarray:
    out = pixels.astype(np.float32, copy=True)
    out[..., :3] = out[..., :3] * options.scale + options.bias
    return out


KERNELS = {
    ConvertPipeline.GENERIC: convert_generic,
    ConvertPipeline.RECONSTRUCT_Z: reconstruct_z,
    ConvertPipeline.SCALE_BIAS: scale_bias,
}


class SoftwareConverter:
    """Converts frames on the CPU with the same interface as GPUConverter."""

    def __init__(
        self,
        width: int,
        height: int,
        input_format: ImageFormat,
        output_format: ImageFormat,
    ) -> None:
        self.width = width
        self.height = height
        self.input_format = input_format
        self.output_format = output_format
        self.options: ImageConvertOptions | None = None

    def set_options(self, options: ImageConvertOptions | None) -> None:
        self.options = options

    def convert(self, data: bytes | bytearray | memoryview) -> bytes:
        options = (self.options or ImageConvertOptions()).resolve(self.input_format)
        uniform = ConversionOptions.for_formats(
            self.input_format, self.output_format, options
        )

        pixels = decode_pixels(data, self.width, self.height, self.input_format)
        kernel = KERNELS[options.pipeline]
        return encode_pixels(kernel(pixels, uniform), self.output_format)
