# kestrel/texture/swizzle.py
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from kestrel.errors import UnsupportedFormatError
from kestrel.texture.formats import ImageFormat

if TYPE_CHECKING:
    from kestrel.texture.image import Image

# Byte-order changes that need no arithmetic.
_SWIZZLE_PAIRS = {
    frozenset({ImageFormat.R8G8B8A8_UNORM, ImageFormat.B8G8R8A8_UNORM}),
    frozenset({ImageFormat.R8G8B8A8_UNORM, ImageFormat.A8R8G8B8_UNORM}),
    frozenset({ImageFormat.B8G8R8A8_UNORM, ImageFormat.A8R8G8B8_UNORM}),
    frozenset({ImageFormat.R8G8B8A8_UNORM_SRGB, ImageFormat.B8G8R8A8_UNORM_SRGB}),
}


def is_swizzled(source: ImageFormat, target: ImageFormat) -> bool:
    return frozenset({source, target}) in _SWIZZLE_PAIRS


def swizzle_indices(source: ImageFormat, target: ImageFormat) -> list[int]:
    """For each target channel, the source channel index that fills it."""
    src_order = source.info.order
    return [src_order.index(ch) for ch in target.info.order]


def swizzle_buffer(
    buffer: bytes | bytearray, source: ImageFormat, target: ImageFormat
) -> bytearray:
    if not is_swizzled(source, target):
        raise UnsupportedFormatError(
            target.name, f"cannot swizzle from {source.name}"
        )

    pixels = np.frombuffer(bytes(buffer), dtype=np.uint8).reshape(-1, 4)
    return bytearray(pixels[:, swizzle_indices(source, target)].tobytes())


def software_swizzle_image(image: Image, target: ImageFormat) -> None:
    """Reorder every frame's bytes in place (all mips included)."""
    for frame in image.frames:
        frame.replace_buffer(swizzle_buffer(frame.buffer, image.format, target))
