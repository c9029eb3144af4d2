# kestrel/texture/__init__.py
from kestrel.texture.converter import GPUConverter
from kestrel.texture.formats import (
    Encoding,
    FormatInfo,
    ImageFormat,
    decode_pixels,
    encode_pixels,
)
from kestrel.texture.image import ConvertBackend, Frame, Image, Rect, ResizeAlgorithm
from kestrel.texture.options import (
    ConversionOptions,
    ConvertMode,
    ConvertPipeline,
    ImageConvertOptions,
)
from kestrel.texture.software import SoftwareConverter
from kestrel.texture.swizzle import is_swizzled

__all__ = [
    "ConversionOptions",
    "ConvertBackend",
    "ConvertMode",
    "ConvertPipeline",
    "Encoding",
    "FormatInfo",
    "Frame",
    "GPUConverter",
    "Image",
    "ImageConvertOptions",
    "ImageFormat",
    "Rect",
    "ResizeAlgorithm",
    "SoftwareConverter",
    "decode_pixels",
    "encode_pixels",
    "is_swizzled",
]
