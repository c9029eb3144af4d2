# kestrel/graphics/utils/uniforms.py
import struct

import moderngl
import numpy as np

# std140 Alignment Rules:
# Scalar (uint, bool, float) = 4 bytes (N=4)
# Vec3 = 16 bytes (4N) - Hardware treats vec3 as vec4
# Mat4 = 64 bytes (Array of 4 Vec4s)
# Block size rounds up to a multiple of 16.

CAMERA_BLOCK = "Camera"
CAMERA_BINDING = 0

CONVERSION_OPTIONS_BLOCK = "ConversionOptions"
CONVERSION_OPTIONS_BINDING = 1

CONVERSION_OPTIONS_SIZE = 32
CAMERA_UNIFORM_SIZE = 352


def pack_float(val: float) -> bytes:
    return struct.pack("f", val)


def pack_uint(val: int) -> bytes:
    return struct.pack("I", val)


def pack_bool(val: bool) -> bytes:
    """GLSL has no 1-byte bool in std140; booleans travel as u32 0/1."""
    return pack_uint(1 if val else 0)


def pack_vec3_std140(x: float, y: float, z: float) -> bytes:
    """Packs vec3 with 4th float padding (16 bytes total)."""
    return struct.pack("3f4x", x, y, z)


def pack_mat4(mat: np.ndarray) -> bytes:
    """
    Packs a 4x4 row-major numpy matrix as a column-major GLSL mat4.
    """
    if mat.shape != (4, 4):
        raise ValueError("Matrix must be 4x4")
    return np.ascontiguousarray(mat.astype("f4").T).tobytes()


def pad_std140(data: bytes) -> bytes:
    remainder = len(data) % 16
    if remainder:
        data += b"\x00" * (16 - remainder)
    return data


def bind_uniform_block(program: moderngl.Program, name: str, binding: int) -> bool:
    """
    Point a program's uniform block at a binding index.

    Returns False if the program does not declare the block (the GLSL
    compiler drops unused blocks).
    """
    if name not in program:
        return False

    member = program[name]
    if not isinstance(member, moderngl.UniformBlock):
        raise TypeError(f"'{name}' is not a uniform block in this program")

    member.binding = binding
    return True


def set_sampler(program: moderngl.Program, name: str, unit: int) -> None:
    if name not in program:
        return

    member = program[name]
    if isinstance(member, moderngl.Uniform):
        member.value = unit
