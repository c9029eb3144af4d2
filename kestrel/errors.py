# kestrel/errors.py
from __future__ import annotations


class TextureError(Exception):
    """Base class for image container and conversion failures."""


class InvalidImageSize(TextureError, ValueError):
    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"Invalid image size {width}x{height}")
        self.width = width
        self.height = height


class InvalidFrameSize(TextureError, ValueError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Frame buffer is {actual} bytes, expected {expected}")
        self.expected = expected
        self.actual = actual


class UnsupportedFormatError(TextureError, ValueError):
    def __init__(self, format_name: str, reason: str = "") -> None:
        msg = f"Unsupported image format '{format_name}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.format_name = format_name


class ConversionError(TextureError, RuntimeError):
    """The GPU failed to produce or return a converted frame."""


class PreviewError(RuntimeError):
    """An asset could not be turned into preview GPU resources."""


class InvalidMipMaps(TextureError, ValueError):
    def __init__(self, mipmaps: int) -> None:
        super().__init__(f"Invalid mip count {mipmaps}")
        self.mipmaps = mipmaps


class InvalidOperation(TextureError, ValueError):
    """The image cannot take part in the requested operation as it is."""
