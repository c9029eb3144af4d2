# kestrel/graphics/utils/layouts.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import moderngl


@dataclass(frozen=True)
class VertexLayout:
    """Describes vertex attributes for VAO creation."""

    attributes: Tuple[str, ...]  # e.g. ("in_position", "in_normal", "in_uv")
    format: str  # moderngl buffer format string e.g. "3f 3f 2f"
    stride_bytes: int

    def content(self, buffer: moderngl.Buffer) -> list[tuple]:
        """VAO content list for `ctx.vertex_array(program, content)`."""
        return [(buffer, self.format, *self.attributes)]


BONE_LAYOUT = VertexLayout(("in_position",), "3f", 12)
GRID_LAYOUT = VertexLayout(("in_position", "in_color"), "3f 3f", 24)
MESH_LAYOUT = VertexLayout(("in_position", "in_normal", "in_uv"), "3f 3f 2f", 32)
IMAGE_LAYOUT = VertexLayout(("in_position", "in_uv"), "3f 2f", 20)
