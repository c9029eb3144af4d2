# kestrel/preview/programs.py
from __future__ import annotations

import moderngl

from kestrel.gpu.instance import GPUInstance
from kestrel.graphics.shaders.program_types import ShaderStages
from kestrel.graphics.shaders.shader_manager import ShaderDefine, ShaderRequest
from kestrel.graphics.util.ids import ShaderId
from kestrel.graphics.utils.uniforms import (
    CAMERA_BINDING,
    CAMERA_BLOCK,
    bind_uniform_block,
)
from kestrel.preview.shading import shading_defines


def preview_request(name: str, *variant: str) -> ShaderRequest:
    """
    Request for `preview/<name>.vert` + `preview/<name>.frag`.

    `variant` names extra defines (e.g. "CULL", "GRAYSCALE").
    """
    defines = shading_defines() + tuple(ShaderDefine(v) for v in variant)
    suffix = f"[{','.join(variant)}]" if variant else ""
    return ShaderRequest(
        shader_id=ShaderId(f"preview_{name}"),
        stages=ShaderStages(
            vertex=f"preview/{name}.vert",
            fragment=f"preview/{name}.frag",
        ),
        defines=defines,
        label=f"Preview{name.capitalize()}{suffix}",
    )


def preview_program(instance: GPUInstance, name: str, *variant: str) -> moderngl.Program:
    """Compile (or fetch) a preview program with its Camera block bound."""
    program = instance.program(preview_request(name, *variant))
    bind_uniform_block(program, CAMERA_BLOCK, CAMERA_BINDING)
    return program
