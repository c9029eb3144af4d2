# kestrel/graphics/helpers/fullscreen.py
from __future__ import annotations

import moderngl

FULLSCREEN_VERTEX_COUNT = 6

# Two triangles covering clip space. Mirrors the table in fullscreen.vert.
FULLSCREEN_POSITIONS = (
    (-1.0, -1.0),
    (1.0, -1.0),
    (1.0, 1.0),
    (-1.0, -1.0),
    (1.0, 1.0),
    (-1.0, 1.0),
)


def fullscreen_vertex(index: int) -> tuple[tuple[float, float], tuple[float, float]]:
    """
    Position and UV the vertex stage derives from `gl_VertexID`.

    v follows clip-space y because OpenGL stores row 0 of an uploaded image at
    v = 0 and reads framebuffers back bottom row first, so row i of the
    input lands in row i of the output.
    """
    x, y = FULLSCREEN_POSITIONS[index % FULLSCREEN_VERTEX_COUNT]
    return (x, y), (x * 0.5 + 0.5, y * 0.5 + 0.5)


def create_fullscreen_quad(
    ctx: moderngl.Context, program: moderngl.Program
) -> moderngl.VertexArray:
    """
    Create a vertex array for the index-derived fullscreen quad.

    No vertex buffer is attached; render with
    `vao.render(moderngl.TRIANGLES, vertices=FULLSCREEN_VERTEX_COUNT)`.
    """
    return ctx.vertex_array(program, [])
