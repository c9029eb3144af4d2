# kestrel/graphics/resources/texture.py
from __future__ import annotations

import moderngl

from kestrel.errors import PreviewError
from kestrel.texture.image import Image


class GPUTexture:
    """
    Wrapper around moderngl.Texture holding the top mip of an image's first
    frame. Channels come back from the sampler in RGBA order whatever the
    memory order.
    """

    def __init__(
        self,
        ctx: moderngl.Context,
        image: Image,
        *,
        repeat: bool = False,
    ) -> None:
        fmt = image.format
        if fmt.is_int:
            raise PreviewError(f"Cannot sample integer format {fmt.name}")
        if not image.frames:
            raise PreviewError("Image has no frames to upload")

        self.width = image.width
        self.height = image.height
        self.format = fmt

        top = fmt.buffer_size(image.width, image.height)

        self.handle = ctx.texture(
            (image.width, image.height),
            fmt.components,
            bytes(image.frames[0].buffer[:top]),
            dtype=fmt.gl_dtype,
            alignment=1,
        )
        self.handle.filter = (moderngl.LINEAR, moderngl.LINEAR)
        self.handle.repeat_x = repeat
        self.handle.repeat_y = repeat
        self.handle.swizzle = fmt.gl_swizzle

    @property
    def srgb(self) -> bool:
        return self.format.is_srgb

    def use(self, location: int = 0) -> None:
        self.handle.use(location)

    def release(self) -> None:
        self.handle.release()
