# kestrel/texture/image.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List

import numpy as np
from PIL import Image as PILImage

from kestrel.errors import (
    InvalidImageSize,
    InvalidMipMaps,
    InvalidOperation,
    UnsupportedFormatError,
)
from kestrel.texture.converter import GPUConverter
from kestrel.texture.formats import ImageFormat, decode_pixels, encode_pixels
from kestrel.texture.options import ImageConvertOptions
from kestrel.texture.software import SoftwareConverter
from kestrel.texture.swizzle import is_swizzled, software_swizzle_image

if TYPE_CHECKING:
    from kestrel.gpu.instance import GPUInstance


class ConvertBackend(str, Enum):
    GPU = "gpu"
    SOFTWARE = "software"


class ResizeAlgorithm(str, Enum):
    NEAREST_NEIGHBOR = "nearest_neighbor"
    BICUBIC = "bicubic"

    @property
    def resampling(self) -> PILImage.Resampling:
        if self is ResizeAlgorithm.NEAREST_NEIGHBOR:
            return PILImage.Resampling.NEAREST
        return PILImage.Resampling.BICUBIC


@dataclass(frozen=True, slots=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


class Frame:
    """One frame of an image: the top mip followed by every smaller mip."""

    __slots__ = ("_buffer",)

    def __init__(self, size: int) -> None:
        self._buffer = bytearray(size)

    @property
    def buffer(self) -> bytearray:
        return self._buffer

    def replace_buffer(self, buffer: bytes | bytearray) -> None:
        self._buffer = bytearray(buffer)

    def __len__(self) -> int:
        return len(self._buffer)


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidImageSize(width, height)


def _resample_channels(
    pixels: np.ndarray, width: int, height: int, algorithm: ResizeAlgorithm
) -> np.ndarray:
    """Resample stored channel values, one Pillow "F" image per channel."""
    resized = [
        np.asarray(
            PILImage.fromarray(
                np.ascontiguousarray(pixels[..., i], dtype=np.float32)
            ).resize((width, height), algorithm.resampling)
        )
        for i in range(pixels.shape[2])
    ]
    out = np.stack(resized, axis=-1)

    if np.issubdtype(pixels.dtype, np.integer):
        limits = np.iinfo(pixels.dtype)
        out = np.clip(np.rint(out), limits.min, limits.max)
    return out.astype(pixels.dtype)


class Image:
    """
    An uncompressed image or texture holding one or more frames.

    Frames share the image's dimensions, format and mip count. Frame data
    is tightly packed, rows top to bottom, no row padding.
    """

    def __init__(
        self, width: int, height: int, format: ImageFormat, mipmaps: int = 1
    ) -> None:
        _check_size(width, height)
        if mipmaps <= 0:
            raise InvalidMipMaps(mipmaps)

        self.width = width
        self.height = height
        self.format = format
        self.mipmaps = mipmaps
        self.frames: List[Frame] = []

    @classmethod
    def new(cls, width: int, height: int, format: ImageFormat) -> Image:
        return cls(width, height, format)

    @classmethod
    def with_mipmaps(
        cls, width: int, height: int, mipmaps: int, format: ImageFormat
    ) -> Image:
        return cls(width, height, format, mipmaps)

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int, *, srgb: bool = False) -> Image:
        """4x4 solid color image."""
        fmt = ImageFormat.R8G8B8A8_UNORM_SRGB if srgb else ImageFormat.R8G8B8A8_UNORM
        image = cls(4, 4, fmt)
        image.create_frame().replace_buffer(bytes((r, g, b, a)) * 16)
        return image

    @classmethod
    def from_rgba_f32(
        cls, r: float, g: float, b: float, a: float, *, srgb: bool = False
    ) -> Image:
        def to_u8(v: float) -> int:
            return min(255, max(0, int(v * 255.0)))

        return cls.from_rgba(to_u8(r), to_u8(g), to_u8(b), to_u8(a), srgb=srgb)

    @classmethod
    def from_array(cls, pixels: np.ndarray, format: ImageFormat) -> Image:
        """Build a single-frame image from float RGBA shaped (height, width, 4)."""
        pixels = np.asarray(pixels, dtype=np.float32)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (height, width, 4) pixels, got {pixels.shape}")

        height, width = pixels.shape[:2]
        image = cls(width, height, format)
        image.create_frame().replace_buffer(encode_pixels(pixels, format))
        return image

    @classmethod
    def from_pil(cls, img: PILImage.Image, *, srgb: bool = True) -> Image:
        converted = img.convert("RGBA")
        width, height = converted.size

        fmt = ImageFormat.R8G8B8A8_UNORM_SRGB if srgb else ImageFormat.R8G8B8A8_UNORM
        image = cls(width, height, fmt)
        image.create_frame().replace_buffer(converted.tobytes())
        return image

    def to_array(self, frame: int = 0) -> np.ndarray:
        """Top mip of a frame as float RGBA shaped (height, width, 4)."""
        return decode_pixels(
            self.frames[frame].buffer, self.width, self.height, self.format
        )

    def to_pil(self, frame: int = 0) -> PILImage.Image:
        if self.format in (ImageFormat.R8G8B8A8_UNORM, ImageFormat.R8G8B8A8_UNORM_SRGB):
            top = self.format.buffer_size(self.width, self.height)
            data = bytes(self.frames[frame].buffer[:top])
        else:
            target = (
                ImageFormat.R8G8B8A8_UNORM_SRGB
                if self.format.is_srgb
                else ImageFormat.R8G8B8A8_UNORM
            )
            data = encode_pixels(self.to_array(frame), target)
        return PILImage.frombytes("RGBA", (self.width, self.height), data)

    def frame_size(self, width: int | None = None, height: int | None = None) -> int:
        """Bytes per frame with this image's mip count."""
        return self.frame_size_with_mipmaps(width, height, self.mipmaps)

    def frame_size_with_mipmaps(
        self, width: int | None = None, height: int | None = None, mipmaps: int = 1
    ) -> int:
        mip_width = self.width if width is None else width
        mip_height = self.height if height is None else height

        size = 0
        for _ in range(mipmaps):
            size += self.format.buffer_size(mip_width, mip_height)
            mip_width = max(1, mip_width // 2)
            mip_height = max(1, mip_height // 2)
        return size

    def create_frame(self) -> Frame:
        frame = Frame(self.frame_size())
        self.frames.append(frame)
        return frame

    @property
    def size(self) -> int:
        return sum(len(f) for f in self.frames)

    def convert(
        self,
        format: ImageFormat,
        options: ImageConvertOptions | None = None,
        *,
        backend: ConvertBackend = ConvertBackend.GPU,
        instance: GPUInstance | None = None,
    ) -> None:
        """
        Convert every frame to `format` in place.

        Converting through a pipeline keeps only the top mip of each frame.
        """
        options = (options or ImageConvertOptions()).resolve(self.format)

        if self.format is format and options.is_noop:
            return

        if self.format.is_int or format.is_int:
            raise UnsupportedFormatError(
                format.name, f"cannot convert from {self.format.name}"
            )

        if options.is_noop and is_swizzled(self.format, format):
            software_swizzle_image(self, format)
            self.format = format
            return

        if backend is ConvertBackend.GPU:
            converter = GPUConverter(
                self.width, self.height, self.format, format, instance=instance
            )
        else:
            converter = SoftwareConverter(self.width, self.height, self.format, format)
        converter.set_options(options)

        for frame in self.frames:
            frame.replace_buffer(converter.convert(frame.buffer))

        self.mipmaps = 1
        self.format = format

    def resize(
        self,
        width: int,
        height: int,
        algorithm: ResizeAlgorithm = ResizeAlgorithm.BICUBIC,
    ) -> None:
        """
        Resample every frame to `width` x `height` in place.

        Stored values are resampled as-is, so sRGB data is filtered in
        gamma space. Only the top mip survives.
        """
        if width == 0 or height == 0:
            raise InvalidOperation(f"Cannot resize to {width}x{height}")
        _check_size(width, height)

        dtype = self.format.numpy_dtype
        components = self.format.components
        top = self.format.buffer_size(self.width, self.height)

        for frame in self.frames:
            pixels = np.frombuffer(bytes(frame.buffer[:top]), dtype=dtype).reshape(
                self.height, self.width, components
            )
            resized = _resample_channels(pixels, width, height, algorithm)
            frame.replace_buffer(resized.tobytes())

        self.width = width
        self.height = height
        self.mipmaps = 1

    def copy_rect(self, source: Image, rect: Rect, dest_x: int, dest_y: int) -> None:
        """
        Copy `rect` of the source's first frame to (`dest_x`, `dest_y`) of ours.

        The copied region is clipped to both images; a region clipped away
        entirely copies nothing.
        """
        if source.format is not self.format:
            raise UnsupportedFormatError(
                source.format.name, f"cannot copy into {self.format.name}"
            )
        if len(source.frames) != len(self.frames):
            raise InvalidOperation(
                f"Frame counts differ: {len(source.frames)} != {len(self.frames)}"
            )
        if not self.frames:
            raise InvalidOperation("Cannot copy between images without frames")
        if min(rect.x, rect.y, rect.width, rect.height) < 0:
            raise InvalidOperation(f"Negative source rect {rect}")
        if rect.x > source.width or rect.y > source.height:
            raise InvalidOperation(
                f"Source rect {rect} starts outside {source.width}x{source.height}"
            )

        src_x, src_y = rect.x, rect.y
        width, height = rect.width, rect.height

        if dest_x < 0:
            width += dest_x
            src_x -= dest_x
            dest_x = 0
        if dest_y < 0:
            height += dest_y
            src_y -= dest_y
            dest_y = 0

        width = min(width, self.width - dest_x, source.width - src_x)
        height = min(height, self.height - dest_y, source.height - src_y)
        if width <= 0 or height <= 0:
            return

        bpp = self.format.bytes_per_pixel
        src_buf = source.frames[0].buffer
        dest_buf = self.frames[0].buffer
        row = width * bpp

        for y in range(height):
            src_off = ((src_y + y) * source.width + src_x) * bpp
            dest_off = ((dest_y + y) * self.width + dest_x) * bpp
            dest_buf[dest_off : dest_off + row] = src_buf[src_off : src_off + row]
