# kestrel/texture/converter.py
from __future__ import annotations

import moderngl
import numpy as np

from kestrel.errors import ConversionError, UnsupportedFormatError
from kestrel.gpu.instance import GPUInstance, gpu_instance
from kestrel.graphics.helpers.fullscreen import (
    FULLSCREEN_VERTEX_COUNT,
    create_fullscreen_quad,
)
from kestrel.graphics.shaders.program_types import ShaderStages
from kestrel.graphics.shaders.shader_manager import ShaderDefine, ShaderRequest
from kestrel.graphics.util.ids import ShaderId
from kestrel.graphics.utils.uniforms import (
    CONVERSION_OPTIONS_BINDING,
    CONVERSION_OPTIONS_BLOCK,
    bind_uniform_block,
    set_sampler,
)
from kestrel.texture.formats import ImageFormat, encode_pixels
from kestrel.texture.options import (
    ConversionOptions,
    ConvertPipeline,
    ImageConvertOptions,
)

_INPUT_UNIT = 0

# Target dtypes glReadPixels hands back byte-for-byte in the stored layout.
_DIRECT_DTYPES = ("f1", "f2", "f4")

# Sampling decodes to linear; every sRGB format is 4x8 bits.
_GL_SRGB8_ALPHA8 = 0x8C43


def converter_request(pipeline: ConvertPipeline) -> ShaderRequest:
    return ShaderRequest(
        shader_id=ShaderId("converter"),
        stages=ShaderStages(
            vertex="converter/fullscreen.vert",
            fragment="converter/convert.frag",
        ),
        defines=(ShaderDefine(pipeline.value),),
        label=f"Converter[{pipeline.name}]",
    )


def _writes_directly(fmt: ImageFormat) -> bool:
    # sRGB targets go through the float path so the host applies the transfer.
    return (
        fmt.renderable
        and not fmt.is_srgb
        and fmt.gl_dtype in _DIRECT_DTYPES
    )


def _source_storage(fmt: ImageFormat) -> dict:
    if fmt.is_srgb:
        return {"internal_format": _GL_SRGB8_ALPHA8}
    return {}


class GPUConverter:
    """
    Converts one frame at a time between two formats on the GPU.

    Every texture, framebuffer and buffer created by `convert` is released
    before it returns; only the compiled program stays cached on the
    instance's shader manager.
    """

    def __init__(
        self,
        width: int,
        height: int,
        input_format: ImageFormat,
        output_format: ImageFormat,
        *,
        instance: GPUInstance | None = None,
    ) -> None:
        for fmt in (input_format, output_format):
            if fmt.is_int:
                raise UnsupportedFormatError(
                    fmt.name, "integer formats cannot be sampled as floats"
                )

        self.width = width
        self.height = height
        self.input_format = input_format
        self.output_format = output_format
        self.options: ImageConvertOptions | None = None
        self._instance = instance

    @property
    def instance(self) -> GPUInstance:
        if self._instance is None:
            self._instance = gpu_instance()
        return self._instance

    def set_options(self, options: ImageConvertOptions | None) -> None:
        self.options = options

    def convert(self, data: bytes | bytearray | memoryview) -> bytes:
        expected = self.input_format.buffer_size(self.width, self.height)
        if len(data) < expected:
            raise ConversionError(
                f"Input frame is {len(data)} bytes, expected {expected}"
            )

        options = (self.options or ImageConvertOptions()).resolve(self.input_format)
        uniform = ConversionOptions.for_formats(
            self.input_format, self.output_format, options
        )

        ctx = self.instance.ctx
        program = self.instance.program(converter_request(options.pipeline))

        owned: list = []
        try:
            source = ctx.texture(
                (self.width, self.height),
                self.input_format.components,
                bytes(data[:expected]),
                dtype=self.input_format.gl_dtype,
                alignment=1,
                **_source_storage(self.input_format),
            )
            owned.append(source)
            source.filter = (moderngl.NEAREST, moderngl.NEAREST)
            source.repeat_x = False
            source.repeat_y = False
            source.swizzle = self.input_format.gl_swizzle

            direct = _writes_directly(self.output_format)
            components = self.output_format.components if direct else 4
            dtype = self.output_format.gl_dtype if direct else "f4"

            target = ctx.texture(
                (self.width, self.height), components, dtype=dtype
            )
            owned.append(target)

            fbo = ctx.framebuffer(color_attachments=[target])
            owned.append(fbo)

            ubo = ctx.buffer(uniform.pack())
            owned.append(ubo)
            ubo.bind_to_uniform_block(CONVERSION_OPTIONS_BINDING)
            bind_uniform_block(
                program, CONVERSION_OPTIONS_BLOCK, CONVERSION_OPTIONS_BINDING
            )

            vao = create_fullscreen_quad(ctx, program)
            owned.append(vao)

            fbo.use()
            ctx.viewport = (0, 0, self.width, self.height)
            ctx.disable(moderngl.DEPTH_TEST | moderngl.BLEND)

            source.use(_INPUT_UNIT)
            set_sampler(program, "u_input", _INPUT_UNIT)
            vao.render(moderngl.TRIANGLES, vertices=FULLSCREEN_VERTEX_COUNT)

            raw = fbo.read(components=components, dtype=dtype, alignment=1)
        except moderngl.Error as e:
            raise ConversionError(
                f"GPU conversion {self.input_format.name} -> "
                f"{self.output_format.name} failed: {e}"
            ) from e
        finally:
            for obj in reversed(owned):
                obj.release()

        if direct:
            return raw

        pixels = np.frombuffer(raw, dtype=np.float32).reshape(
            self.height, self.width, 4
        )
        return encode_pixels(pixels, self.output_format)
