# kestrel/texture/formats.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from kestrel.errors import InvalidFrameSize
from kestrel.texture.colorspace import linear_to_srgb, srgb_to_linear

_RGBA = "RGBA"


class Encoding(str, Enum):
    """How stored channel values map to the floats a shader sees."""

    UNORM = "unorm"
    SNORM = "snorm"
    SRGB = "srgb"
    FLOAT = "float"
    UINT = "uint"


@dataclass(frozen=True, slots=True)
class FormatInfo:
    components: int
    bits: int  # per channel
    encoding: Encoding
    order: str = _RGBA  # channel order in memory


class ImageFormat(Enum):
    """Uncompressed pixel layouts the converter and previews understand."""

    R8_UNORM = FormatInfo(1, 8, Encoding.UNORM, "R")
    R8_SNORM = FormatInfo(1, 8, Encoding.SNORM, "R")
    R8G8_UNORM = FormatInfo(2, 8, Encoding.UNORM, "RG")
    R8G8_SNORM = FormatInfo(2, 8, Encoding.SNORM, "RG")
    R8G8B8A8_UNORM = FormatInfo(4, 8, Encoding.UNORM)
    R8G8B8A8_UNORM_SRGB = FormatInfo(4, 8, Encoding.SRGB)
    R8G8B8A8_SNORM = FormatInfo(4, 8, Encoding.SNORM)
    R8G8B8A8_UINT = FormatInfo(4, 8, Encoding.UINT)
    B8G8R8A8_UNORM = FormatInfo(4, 8, Encoding.UNORM, "BGRA")
    B8G8R8A8_UNORM_SRGB = FormatInfo(4, 8, Encoding.SRGB, "BGRA")
    A8R8G8B8_UNORM = FormatInfo(4, 8, Encoding.UNORM, "ARGB")
    R16_UNORM = FormatInfo(1, 16, Encoding.UNORM, "R")
    R16_FLOAT = FormatInfo(1, 16, Encoding.FLOAT, "R")
    R16G16_UNORM = FormatInfo(2, 16, Encoding.UNORM, "RG")
    R16G16_SNORM = FormatInfo(2, 16, Encoding.SNORM, "RG")
    R16G16_FLOAT = FormatInfo(2, 16, Encoding.FLOAT, "RG")
    R16G16B16A16_UNORM = FormatInfo(4, 16, Encoding.UNORM)
    R16G16B16A16_SNORM = FormatInfo(4, 16, Encoding.SNORM)
    R16G16B16A16_FLOAT = FormatInfo(4, 16, Encoding.FLOAT)
    R32_FLOAT = FormatInfo(1, 32, Encoding.FLOAT, "R")
    R32G32_FLOAT = FormatInfo(2, 32, Encoding.FLOAT, "RG")
    R32G32B32A32_FLOAT = FormatInfo(4, 32, Encoding.FLOAT)

    @property
    def info(self) -> FormatInfo:
        return self.value

    @property
    def components(self) -> int:
        return self.value.components

    @property
    def encoding(self) -> Encoding:
        return self.value.encoding

    @property
    def bytes_per_pixel(self) -> int:
        return self.value.components * self.value.bits // 8

    @property
    def is_unorm(self) -> bool:
        """sRGB data is stored unorm; samplers and `decode_pixels` linearize it."""
        return self.encoding in (Encoding.UNORM, Encoding.SRGB)

    @property
    def is_snorm(self) -> bool:
        return self.encoding is Encoding.SNORM

    @property
    def is_srgb(self) -> bool:
        return self.encoding is Encoding.SRGB

    @property
    def is_float(self) -> bool:
        return self.encoding is Encoding.FLOAT

    @property
    def is_int(self) -> bool:
        return self.encoding is Encoding.UINT

    @property
    def numpy_dtype(self) -> np.dtype:
        bits = self.value.bits
        enc = self.encoding
        if enc is Encoding.FLOAT:
            return np.dtype("<f2" if bits == 16 else "<f4")
        if enc is Encoding.SNORM:
            return np.dtype("i1" if bits == 8 else "<i2")
        return np.dtype("u1" if bits == 8 else "<u2")

    @property
    def gl_dtype(self) -> str:
        """ModernGL texture dtype string."""
        bits = self.value.bits
        enc = self.encoding
        if enc is Encoding.FLOAT:
            return "f2" if bits == 16 else "f4"
        if enc is Encoding.SNORM:
            return "ni1" if bits == 8 else "ni2"
        if enc is Encoding.UINT:
            return "u1"
        return "f1" if bits == 8 else "nu2"

    @property
    def gl_swizzle(self) -> str:
        """Texture swizzle that makes a sampler return (r, g, b, a) for this memory order."""
        order = self.value.order
        if len(order) < 4:
            return _RGBA
        return "".join(_RGBA[order.index(ch)] for ch in _RGBA)

    @property
    def renderable(self) -> bool:
        """Whether a converter may write this layout directly from a fragment shader."""
        return (
            self.encoding in (Encoding.UNORM, Encoding.SRGB, Encoding.FLOAT)
            and self.value.order in ("R", "RG", _RGBA)
        )

    @property
    def max_value(self) -> float:
        bits = self.value.bits
        if self.encoding is Encoding.SNORM:
            return float((1 << (bits - 1)) - 1)
        return float((1 << bits) - 1)

    def buffer_size(self, width: int, height: int) -> int:
        return width * height * self.bytes_per_pixel


def decode_pixels(
    buffer: bytes | bytearray | memoryview,
    width: int,
    height: int,
    fmt: ImageFormat,
) -> np.ndarray:
    """
    Decode a frame into float32 RGBA the way a sampler would read it.

    Channels the format lacks read as G = B = 0, A = 1. sRGB color channels
    come back linear; alpha is stored linear already.
    Returns an array shaped (height, width, 4).
    """
    expected = fmt.buffer_size(width, height)
    if len(buffer) < expected:
        raise InvalidFrameSize(expected, len(buffer))

    raw = np.frombuffer(
        buffer, dtype=fmt.numpy_dtype, count=width * height * fmt.components
    ).reshape(height, width, fmt.components)

    enc = fmt.encoding
    if enc in (Encoding.UNORM, Encoding.SRGB):
        values = raw.astype(np.float32) / fmt.max_value
    elif enc is Encoding.SNORM:
        values = np.maximum(raw.astype(np.float32) / fmt.max_value, -1.0)
    else:
        values = raw.astype(np.float32)

    out = np.zeros((height, width, 4), dtype=np.float32)
    out[..., 3] = 1.0
    for i, ch in enumerate(fmt.info.order):
        out[..., _RGBA.index(ch)] = values[..., i]

    if enc is Encoding.SRGB:
        out[..., :3] = srgb_to_linear(out[..., :3])
    return out


def encode_pixels(pixels: np.ndarray, fmt: ImageFormat) -> bytes:
    """Quantize float32 RGBA (height, width, 4) into `fmt`'s memory layout."""
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected (height, width, 4) pixels, got {pixels.shape}")

    enc = fmt.encoding
    if enc is Encoding.SRGB:
        pixels = np.array(pixels, dtype=np.float32)
        pixels[..., :3] = linear_to_srgb(np.clip(pixels[..., :3], 0.0, 1.0))

    channels = np.stack(
        [pixels[..., _RGBA.index(ch)] for ch in fmt.info.order], axis=-1
    )

    if enc in (Encoding.UNORM, Encoding.SRGB):
        stored = np.rint(np.clip(channels, 0.0, 1.0) * fmt.max_value)
    elif enc is Encoding.SNORM:
        stored = np.rint(np.clip(channels, -1.0, 1.0) * fmt.max_value)
    elif enc is Encoding.UINT:
        stored = np.rint(np.clip(channels, 0.0, fmt.max_value))
    else:
        stored = channels

    return np.ascontiguousarray(stored.astype(fmt.numpy_dtype)).tobytes()
