# kestrel/__init__.py
"""GPU texture conversion and asset preview rendering on ModernGL."""

from kestrel.errors import (
    ConversionError,
    InvalidFrameSize,
    InvalidImageSize,
    InvalidMipMaps,
    InvalidOperation,
    PreviewError,
    TextureError,
    UnsupportedFormatError,
)

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "InvalidFrameSize",
    "InvalidImageSize",
    "InvalidMipMaps",
    "InvalidOperation",
    "PreviewError",
    "TextureError",
    "UnsupportedFormatError",
]
