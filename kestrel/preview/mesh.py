# kestrel/preview/mesh.py
from __future__ import annotations

from typing import Optional, Sequence

import moderngl
import numpy as np

from kestrel.gpu.instance import GPUInstance
from kestrel.graphics.resources.texture import GPUTexture
from kestrel.graphics.utils.layouts import MESH_LAYOUT
from kestrel.graphics.utils.uniforms import set_sampler
from kestrel.preview.programs import preview_program
from kestrel.preview.types import Mesh
from kestrel.texture.formats import ImageFormat
from kestrel.texture.image import Image

ALBEDO_UNIT = 0

FALLBACK_ALBEDO = (0xA1, 0xA1, 0xA1, 0xFF)


def fallback_image() -> Image:
    """4x4 neutral gray used for meshes without a usable material image."""
    return Image.from_rgba(*FALLBACK_ALBEDO)


class MaterialTexture:
    """Albedo texture bound to `u_albedo` while a mesh draws."""

    def __init__(self, instance: GPUInstance, image: Optional[Image]) -> None:
        if image is None:
            image = fallback_image()
        elif image.format.is_int or not image.frames:
            # Keep the size but draw black, the way an unreadable texture would.
            blank = Image.new(image.width, image.height, ImageFormat.R8G8B8A8_UNORM)
            blank.create_frame()
            image = blank

        self.texture = GPUTexture(instance.ctx, image, repeat=True)

    @property
    def srgb(self) -> bool:
        return self.texture.srgb

    def use(self, location: int = ALBEDO_UNIT) -> None:
        self.texture.use(location)

    def release(self) -> None:
        self.texture.release()


class RenderMesh:
    def __init__(
        self,
        instance: GPUInstance,
        mesh: Mesh,
        material_textures: Sequence[MaterialTexture],
        *,
        culling: bool = False,
    ) -> None:
        if not material_textures:
            raise ValueError("RenderMesh needs at least the fallback material texture")

        ctx = instance.ctx

        # Out-of-range or missing indices use the last texture, the fallback.
        index = mesh.material
        if index is not None and 0 <= index < len(material_textures):
            self.material_texture = material_textures[index]
        else:
            self.material_texture = material_textures[-1]

        self.culling = culling
        self.vertex_count = mesh.vertex_count
        self.face_count = mesh.face_count

        self.vbo: moderngl.Buffer | None = None
        self.ibo: moderngl.Buffer | None = None
        self.vao: moderngl.VertexArray | None = None

        self.program = preview_program(instance, "mesh", *(("CULL",) if culling else ()))

        if self.vertex_count == 0 or self.face_count == 0:
            return

        faces = np.ascontiguousarray(mesh.faces, dtype=np.uint32)
        if faces.size and int(faces.max()) >= self.vertex_count:
            raise ValueError(
                f"Mesh face index {int(faces.max())} out of range for "
                f"{self.vertex_count} vertices"
            )

        self.vbo = ctx.buffer(mesh.interleaved().tobytes())
        self.ibo = ctx.buffer(faces.tobytes())
        self.vao = ctx.vertex_array(
            self.program,
            MESH_LAYOUT.content(self.vbo),
            index_buffer=self.ibo,
            index_element_size=4,
        )

    def draw(self, ctx: moderngl.Context, *, wireframe: bool = False) -> None:
        if self.vao is None:
            return

        ctx.enable(moderngl.DEPTH_TEST)
        if self.culling:
            ctx.front_face = "cw"
            ctx.cull_face = "back"
            ctx.enable(moderngl.CULL_FACE)
        else:
            ctx.disable(moderngl.CULL_FACE)

        self.material_texture.use(ALBEDO_UNIT)
        set_sampler(self.program, "u_albedo", ALBEDO_UNIT)

        ctx.wireframe = wireframe
        try:
            self.vao.render(moderngl.TRIANGLES, vertices=self.face_count * 3)
        finally:
            ctx.wireframe = False
            ctx.disable(moderngl.CULL_FACE)

    def release(self) -> None:
        for obj in (self.vao, self.ibo, self.vbo):
            if obj is not None:
                obj.release()
