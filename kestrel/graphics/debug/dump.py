# kestrel/graphics/debug/dump.py
from __future__ import annotations

from typing import TYPE_CHECKING

import moderngl

from kestrel.graphics.shaders.shader_manager import ShaderManager

if TYPE_CHECKING:
    from kestrel.preview.renderer import PreviewRenderer


def _dump_programs(shader_manager: ShaderManager) -> None:
    print("\n[Programs / Shaders]")
    for handle in shader_manager.cached_programs():
        prog = handle.program
        print(f"\n  Program '{handle.label}'")
        print(f"    Program id    : {prog.glo}")

        for name in prog:
            member = prog[name]
            if isinstance(member, moderngl.UniformBlock):
                print(f"      block {name}: binding={member.binding} size={member.size}")
            elif isinstance(member, moderngl.Uniform):
                print(f"      uniform {name} = {member.value}")
            elif isinstance(member, moderngl.Attribute):
                print(f"      attribute {name} ({member.shape})")


def dump_preview_state(
    renderer: PreviewRenderer,
    *,
    header: str = "PREVIEW RENDERER DEBUG DUMP",
) -> None:
    """
    Dump a snapshot of renderer, camera uniform and GL state.

    Safe to call between frames. Intended for debugging black previews,
    missing overlays and camera blocks that never reach a program.
    """
    gl = renderer.ctx

    print("\n" + "=" * 80)
    print(header)
    print("=" * 80)

    print("\n[Context]")
    print(f"  GL Version      : {gl.version_code}")
    print(f"  Vendor          : {gl.info.get('GL_VENDOR', 'unknown')}")
    print(f"  Renderer        : {gl.info.get('GL_RENDERER', 'unknown')}")
    print(f"  Viewport        : {gl.viewport}")
    print(f"  Max samples     : {gl.max_samples}")

    print("\n[Preview]")
    print(f"  Size            : {renderer.width}x{renderer.height}")
    print(f"  Far clip        : {renderer.far_clip}")
    print(f"  MSAA samples    : {renderer.samples}")
    print(f"  Content         : {type(renderer.render_type).__name__}")
    print(f"  Grid/Bones/Wire : {renderer.show_grid}/{renderer.show_bones}/{renderer.wireframe}")
    for label, value in renderer.statistics():
        print(f"  {label:<16}: {value}")

    camera = renderer.camera
    print("\n[Camera]")
    print(f"  Orbit           : theta={camera.theta:.4f} phi={camera.phi:.4f} radius={camera.radius:.2f}")
    print(f"  Up              : {camera.up}")
    print(f"  Orthographic    : {camera.orthographic}")

    uniform = renderer.uniform
    if uniform is not None:
        print(f"  Target          : {uniform.target}")
        print(f"  Position        : {uniform.camera_position}")
        print(f"  Default shaded  : {uniform.default_shaded}")
        print(f"  sRGB            : {uniform.srgb}")
        print(f"  View            :\n{uniform.view_matrix}")
        print(f"  Projection      :\n{uniform.projection_matrix}")
        print(f"  Model           :\n{uniform.model_matrix}")

    _dump_programs(renderer.instance.shader_manager)

    print("\n" + "=" * 80)
    print("END PREVIEW RENDERER DEBUG DUMP")
    print("=" * 80 + "\n")
