# kestrel/graphics/utils/__init__.py
from kestrel.graphics.utils.layouts import (
    BONE_LAYOUT,
    GRID_LAYOUT,
    IMAGE_LAYOUT,
    MESH_LAYOUT,
    VertexLayout,
)
from kestrel.graphics.utils.uniforms import (
    CAMERA_BINDING,
    CAMERA_UNIFORM_SIZE,
    CONVERSION_OPTIONS_BINDING,
    CONVERSION_OPTIONS_SIZE,
    bind_uniform_block,
    pack_bool,
    pack_float,
    pack_mat4,
    pack_uint,
    pack_vec3_std140,
)

__all__ = [
    "BONE_LAYOUT",
    "GRID_LAYOUT",
    "IMAGE_LAYOUT",
    "MESH_LAYOUT",
    "VertexLayout",
    "CAMERA_BINDING",
    "CAMERA_UNIFORM_SIZE",
    "CONVERSION_OPTIONS_BINDING",
    "CONVERSION_OPTIONS_SIZE",
    "bind_uniform_block",
    "pack_bool",
    "pack_float",
    "pack_mat4",
    "pack_uint",
    "pack_vec3_std140",
]
