# kestrel/preview/model.py
from __future__ import annotations

from typing import List, Optional, Sequence

import moderngl

from kestrel.gpu.instance import GPUInstance
from kestrel.preview.mesh import MaterialTexture, RenderMesh
from kestrel.preview.skeleton import RenderSkeleton
from kestrel.preview.types import Model
from kestrel.texture.image import Image


class RenderModel:
    """Meshes plus an optional bone overlay for one model."""

    def __init__(
        self,
        instance: GPUInstance,
        model: Model,
        materials: Sequence[Optional[Image]] = (),
        *,
        culling: bool = False,
        srgb: Optional[bool] = None,
    ) -> None:
        # The trailing fallback catches meshes with no usable material.
        self.material_textures: List[MaterialTexture] = [
            MaterialTexture(instance, image) for image in materials
        ]
        self.material_textures.append(MaterialTexture(instance, None))

        self.meshes = [
            RenderMesh(instance, mesh, self.material_textures, culling=culling)
            for mesh in model.meshes
        ]

        self.skeleton: RenderSkeleton | None = None
        if not model.skeleton.is_empty():
            self.skeleton = RenderSkeleton(instance, model.skeleton)

        if srgb is None:
            srgb = any(image is not None and image.format.is_srgb for image in materials)
        self.srgb = srgb

    @property
    def mesh_count(self) -> int:
        return len(self.meshes)

    @property
    def vertex_count(self) -> int:
        return sum(mesh.vertex_count for mesh in self.meshes)

    @property
    def face_count(self) -> int:
        return sum(mesh.face_count for mesh in self.meshes)

    @property
    def bone_count(self) -> int:
        return self.skeleton.bone_count if self.skeleton is not None else 0

    def draw(
        self, ctx: moderngl.Context, *, show_bones: bool = True, wireframe: bool = False
    ) -> None:
        for mesh in self.meshes:
            mesh.draw(ctx, wireframe=wireframe)

        if show_bones and self.skeleton is not None:
            self.skeleton.draw(ctx)

    def release(self) -> None:
        for mesh in self.meshes:
            mesh.release()
        for texture in self.material_textures:
            texture.release()
        if self.skeleton is not None:
            self.skeleton.release()
