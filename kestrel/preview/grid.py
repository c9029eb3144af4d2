# kestrel/preview/grid.py
from __future__ import annotations

import moderngl
import numpy as np

from kestrel.gpu.instance import GPUInstance
from kestrel.graphics.utils.layouts import GRID_LAYOUT
from kestrel.preview.programs import preview_program
from kestrel.preview.shading import BONE_COLOR

GRID_COLOR = (0.70, 0.70, 0.70)

# Center lines share the accent blue with the bone overlay.
GRID_CENTER_COLOR = BONE_COLOR


def build_grid_vertices(size: float = 120.0, step: float = 2.0) -> np.ndarray:
    """
    Line-list vertices for a ground grid on the XZ plane.

    Returns (n, 6) float32 rows of position then color; every pair of rows
    is one line. Each step along [-size, size] contributes a line parallel to
    Z and one parallel to X.
    """
    if step <= 0:
        raise ValueError(f"Grid step must be positive, got {step}")

    lines = int(round(2.0 * size / step)) + 1
    rows = []
    for k in range(lines):
        i = -size + k * step
        color = GRID_CENTER_COLOR if abs(i) < 1e-6 else GRID_COLOR

        rows.append((i, 0.0, size, *color))
        rows.append((i, 0.0, -size, *color))
        rows.append((size, 0.0, i, *color))
        rows.append((-size, 0.0, i, *color))

    return np.array(rows, dtype=np.float32).reshape(-1, 6)


class GridRender:
    def __init__(
        self, instance: GPUInstance, *, size: float = 120.0, step: float = 2.0
    ) -> None:
        ctx = instance.ctx
        vertices = build_grid_vertices(size, step)

        self.vertex_count = len(vertices)
        self.program = preview_program(instance, "grid")
        self.vbo = ctx.buffer(vertices.tobytes())
        self.vao = ctx.vertex_array(self.program, GRID_LAYOUT.content(self.vbo))

    def draw(self, ctx: moderngl.Context) -> None:
        ctx.enable(moderngl.DEPTH_TEST)
        self.vao.render(moderngl.LINES, vertices=self.vertex_count)

    def release(self) -> None:
        self.vao.release()
        self.vbo.release()
