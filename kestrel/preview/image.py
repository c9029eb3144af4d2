# kestrel/preview/image.py
from __future__ import annotations

import moderngl
import numpy as np

from kestrel.errors import PreviewError
from kestrel.gpu.instance import GPUInstance
from kestrel.graphics.resources.texture import GPUTexture
from kestrel.graphics.utils.layouts import IMAGE_LAYOUT
from kestrel.graphics.utils.uniforms import set_sampler
from kestrel.preview.programs import preview_program
from kestrel.texture.image import Image

IMAGE_UNIT = 0


def build_image_quad(width: float, height: float) -> np.ndarray:
    """
    Two triangles spanning [0, width] x [0, height] in image pixels.

    Returns (6, 5) float32 rows of position then uv. uv (0, 0) is the first
    row of the image, which the y-down orthographic view puts at the top.
    """
    return np.array(
        [
            (0.0, 0.0, 0.0, 0.0, 0.0),
            (width, 0.0, 0.0, 1.0, 0.0),
            (width, height, 0.0, 1.0, 1.0),
            (0.0, 0.0, 0.0, 0.0, 0.0),
            (width, height, 0.0, 1.0, 1.0),
            (0.0, height, 0.0, 0.0, 1.0),
        ],
        dtype=np.float32,
    )


class RenderImage:
    """Flat textured quad for 2D image previews."""

    def __init__(self, instance: GPUInstance, image: Image) -> None:
        if image.format.is_int:
            raise PreviewError(f"Cannot preview integer format {image.format.name}")

        ctx = instance.ctx

        self.width = image.width
        self.height = image.height
        self.format = image.format
        self.grayscale = image.format.components == 1

        self.texture = GPUTexture(ctx, image)
        self.program = preview_program(
            instance, "image", *(("GRAYSCALE",) if self.grayscale else ())
        )

        self.vbo = ctx.buffer(build_image_quad(self.width, self.height).tobytes())
        self.vao = ctx.vertex_array(self.program, IMAGE_LAYOUT.content(self.vbo))

    @property
    def srgb(self) -> bool:
        return self.format.is_srgb

    def draw(self, ctx: moderngl.Context) -> None:
        ctx.disable(moderngl.DEPTH_TEST | moderngl.CULL_FACE)
        self.texture.use(IMAGE_UNIT)
        set_sampler(self.program, "u_image", IMAGE_UNIT)
        self.vao.render(moderngl.TRIANGLES, vertices=6)

    def release(self) -> None:
        self.vao.release()
        self.vbo.release()
        self.texture.release()
