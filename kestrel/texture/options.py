# kestrel/texture/options.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from kestrel.graphics.utils.uniforms import (
    CONVERSION_OPTIONS_SIZE,
    pack_bool,
    pack_float,
    pad_std140,
)
from kestrel.texture.formats import ImageFormat


class ConvertPipeline(str, Enum):
    """
    Compile-time converter variant. The value is the define that selects it
    in convert.frag.
    """

    GENERIC = "CONVERT_GENERIC"
    RECONSTRUCT_Z = "CONVERT_RECONSTRUCT_Z"
    SCALE_BIAS = "CONVERT_SCALE_BIAS"


class ConvertMode(str, Enum):
    NONE = "none"
    RECONSTRUCT_Z = "reconstruct_z"
    RECONSTRUCT_Z_INVERT_Y = "reconstruct_z_invert_y"
    # Only reconstruct when the source is a two-channel unorm normal map.
    AUTO_RECONSTRUCT_Z = "auto_reconstruct_z"
    AUTO_RECONSTRUCT_Z_INVERT_Y = "auto_reconstruct_z_invert_y"
    SCALE_BIAS = "scale_bias"


@dataclass(frozen=True, slots=True)
class ImageConvertOptions:
    """What a conversion should do besides changing the pixel encoding."""

    mode: ConvertMode = ConvertMode.NONE
    scale: float = 1.0
    bias: float = 0.0

    @classmethod
    def reconstruct_z(cls, *, invert_y: bool = False) -> ImageConvertOptions:
        mode = ConvertMode.RECONSTRUCT_Z_INVERT_Y if invert_y else ConvertMode.RECONSTRUCT_Z
        return cls(mode=mode)

    @classmethod
    def auto_reconstruct_z(cls, *, invert_y: bool = False) -> ImageConvertOptions:
        mode = (
            ConvertMode.AUTO_RECONSTRUCT_Z_INVERT_Y
            if invert_y
            else ConvertMode.AUTO_RECONSTRUCT_Z
        )
        return cls(mode=mode)

    @classmethod
    def scale_bias(cls, scale: float, bias: float) -> ImageConvertOptions:
        return cls(mode=ConvertMode.SCALE_BIAS, scale=scale, bias=bias)

    @property
    def invert_y(self) -> bool:
        return self.mode in (
            ConvertMode.RECONSTRUCT_Z_INVERT_Y,
            ConvertMode.AUTO_RECONSTRUCT_Z_INVERT_Y,
        )

    @property
    def is_noop(self) -> bool:
        return self.mode is ConvertMode.NONE

    def resolve(self, input_format: ImageFormat) -> ImageConvertOptions:
        """Replace AUTO modes with the concrete mode for this source format."""
        if self.mode not in (
            ConvertMode.AUTO_RECONSTRUCT_Z,
            ConvertMode.AUTO_RECONSTRUCT_Z_INVERT_Y,
        ):
            return self

        if input_format.components == 2 and input_format.is_unorm:
            return replace(
                self,
                mode=ConvertMode.RECONSTRUCT_Z_INVERT_Y
                if self.invert_y
                else ConvertMode.RECONSTRUCT_Z,
            )
        return replace(self, mode=ConvertMode.NONE)

    @property
    def pipeline(self) -> ConvertPipeline:
        if self.mode in (ConvertMode.RECONSTRUCT_Z, ConvertMode.RECONSTRUCT_Z_INVERT_Y):
            return ConvertPipeline.RECONSTRUCT_Z
        if self.mode is ConvertMode.SCALE_BIAS:
            return ConvertPipeline.SCALE_BIAS
        return ConvertPipeline.GENERIC


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """
    Uniform record read by every converter variant.

    Built fresh per conversion. Flags are not validated: setting both unorm
    and snorm for one side yields whatever the shader arithmetic produces.
    """

    input_unorm: bool = False
    input_snorm: bool = False
    output_unorm: bool = False
    output_snorm: bool = False
    invert_y: bool = False
    scale: float = 1.0
    bias: float = 0.0

    @classmethod
    def for_formats(
        cls,
        input_format: ImageFormat,
        output_format: ImageFormat,
        options: ImageConvertOptions | None = None,
    ) -> ConversionOptions:
        options = (options or ImageConvertOptions()).resolve(input_format)
        return cls(
            input_unorm=input_format.is_unorm,
            input_snorm=input_format.is_snorm,
            output_unorm=output_format.is_unorm,
            output_snorm=output_format.is_snorm,
            invert_y=options.invert_y,
            scale=options.scale,
            bias=options.bias,
        )

    def pack(self) -> bytes:
        data = b"".join(
            [
                pack_bool(self.input_unorm),
                pack_bool(self.input_snorm),
                pack_bool(self.output_unorm),
                pack_bool(self.output_snorm),
                pack_bool(self.invert_y),
                pack_float(self.scale),
                pack_float(self.bias),
            ]
        )
        data = pad_std140(data)
        assert len(data) == CONVERSION_OPTIONS_SIZE
        return data
