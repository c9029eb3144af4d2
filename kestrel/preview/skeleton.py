# kestrel/preview/skeleton.py
from __future__ import annotations

import moderngl
import numpy as np

from kestrel.gpu.instance import GPUInstance
from kestrel.graphics.utils.layouts import BONE_LAYOUT
from kestrel.preview.programs import preview_program
from kestrel.preview.types import Skeleton


def build_bone_vertices(skeleton: Skeleton) -> np.ndarray:
    """
    One line per bone from the bone to its parent, or to the origin for
    roots. Returns (2 * bones, 3) float32.
    """
    rows = []
    for bone in reversed(skeleton.bones):
        if bone.parent >= len(skeleton.bones):
            raise ValueError(
                f"Bone '{bone.name}' has parent index {bone.parent} "
                f"but the skeleton has {len(skeleton.bones)} bones"
            )
        rows.append(bone.world_position)
        if bone.parent > -1:
            rows.append(skeleton.bones[bone.parent].world_position)
        else:
            rows.append((0.0, 0.0, 0.0))

    return np.array(rows, dtype=np.float32).reshape(-1, 3)


class RenderSkeleton:
    """Bone overlay. Drawn with an always-pass depth test so it shows through meshes."""

    def __init__(self, instance: GPUInstance, skeleton: Skeleton) -> None:
        if skeleton.is_empty():
            raise ValueError("Cannot build a bone overlay for an empty skeleton")

        ctx = instance.ctx
        vertices = build_bone_vertices(skeleton)

        self.bone_count = len(skeleton)
        self.program = preview_program(instance, "bone")
        self.vbo = ctx.buffer(vertices.tobytes())
        self.vao = ctx.vertex_array(self.program, BONE_LAYOUT.content(self.vbo))

    def draw(self, ctx: moderngl.Context) -> None:
        ctx.enable(moderngl.DEPTH_TEST)
        ctx.depth_func = "1"
        try:
            self.vao.render(moderngl.LINES, vertices=self.bone_count * 2)
        finally:
            ctx.depth_func = "<"

    def release(self) -> None:
        self.vao.release()
        self.vbo.release()
