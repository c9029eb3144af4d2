# kestrel/graphics/shaders/shader_manager.py
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Sequence, Tuple

import moderngl

from kestrel.graphics.shaders.program_types import ProgramHandle, ShaderStages
from kestrel.graphics.util.ids import ShaderId

SHADER_ROOT = Path(__file__).resolve().parent

_INCLUDE_RE = re.compile(r'^\s*#include\s+"([^"]+)"\s*$')


def _make_variant_key(
    req: ShaderRequest,
) -> Tuple[ShaderId, Tuple[Tuple[str, str], ...]]:
    defines = tuple(sorted((d.key, d.value) for d in req.defines))
    return (req.shader_id, defines)


def _find_file(name: str, search_paths: Sequence[Path]) -> Path | None:
    for root in search_paths:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_source(src: str, search_paths: Sequence[Path]) -> str:
    """
    Load shader source.

    If src names a file under one of the search paths, load it.
    Otherwise assume it is raw GLSL.
    """
    if "\n" not in src:
        path = _find_file(src, search_paths)
        if path is not None:
            return path.read_text(encoding="utf-8")
    return src


def resolve_includes(
    source: str,
    include_paths: Sequence[Path],
    _stack: Tuple[str, ...] = (),
) -> str:
    """Recursively splice `#include "file.glsl"` lines."""
    out: list[str] = []
    for line in source.splitlines():
        m = _INCLUDE_RE.match(line)
        if m is None:
            out.append(line)
            continue

        name = m.group(1)
        if name in _stack:
            chain = " -> ".join((*_stack, name))
            raise ValueError(f"Cyclic shader include: {chain}")

        path = _find_file(name, include_paths)
        if path is None:
            raise FileNotFoundError(
                f"Shader include '{name}' not found in {[str(p) for p in include_paths]}"
            )

        text = path.read_text(encoding="utf-8")
        out.append(resolve_includes(text, include_paths, (*_stack, name)))
    return "\n".join(out)


def inject_defines(source: str, defines: Sequence[ShaderDefine]) -> str:
    """Insert defines right after `#version`, which must stay the first directive."""
    if not defines:
        return source

    block = "\n".join(f"#define {d.key} {d.value}" for d in defines)

    lines = source.splitlines()
    for i, line in enumerate(lines):
        if line.strip().startswith("#version"):
            return "\n".join([*lines[: i + 1], block, *lines[i + 1 :]])

    return block + "\n\n" + source


@dataclass(frozen=True, slots=True)
class ShaderDefine:
    """Single preprocessor define used to build program variants."""

    key: str
    value: str = "1"


@dataclass(frozen=True, slots=True)
class ShaderRequest:
    """
    Request to load/compile a shader program.

    `stages` can point to:
      - paths relative to the shader root / include paths
      - raw source strings
    """

    shader_id: ShaderId
    stages: ShaderStages
    defines: Sequence[ShaderDefine] = ()
    label: str = ""


class ShaderManager:
    """
    Central shader loader/compiler/cache.

    Responsibilities:
      - resolve includes
      - apply defines
      - compile/link
      - cache program variants
    """

    def __init__(
        self,
        gl: moderngl.Context,
        *,
        include_paths: Sequence[str | Path] = (),
    ) -> None:
        self._gl = gl
        self._include_paths = tuple(Path(p) for p in include_paths) + (
            SHADER_ROOT,
            SHADER_ROOT / "include",
        )

        self._shader_cache: Dict[
            tuple[ShaderId, tuple[tuple[str, str], ...]], ProgramHandle
        ] = {}

    @property
    def include_paths(self) -> Tuple[Path, ...]:
        return self._include_paths

    def preprocess(self, src: str, req: ShaderRequest) -> str:
        text = load_source(src, self._include_paths)
        text = resolve_includes(text, self._include_paths)
        return inject_defines(text, req.defines)

    def get(self, req: ShaderRequest) -> ProgramHandle:
        """Return a compiled program for the request, compiling and caching as needed."""
        key = _make_variant_key(req)
        cached = self._shader_cache.get(key)
        if cached is not None:
            return cached

        stages = req.stages
        if stages.vertex is None or stages.fragment is None:
            raise ValueError(
                f"Shader {req.shader_id} is missing vertex or fragment stage."
            )

        program = self._gl.program(
            vertex_shader=self.preprocess(stages.vertex, req),
            fragment_shader=self.preprocess(stages.fragment, req),
        )

        handle = ProgramHandle(program=program, label=req.label or str(req.shader_id))
        self._shader_cache[key] = handle
        return handle

    def cached_programs(self) -> Sequence[ProgramHandle]:
        return tuple(self._shader_cache.values())

    def invalidate(self, shader_id: ShaderId) -> None:
        """Drop cached programs for a shader id; next get() recompiles."""
        to_delete = [k for k in self._shader_cache if k[0] == shader_id]
        for k in to_delete:
            prog = self._shader_cache.pop(k)
            try:
                prog.program.release()
            except moderngl.Error as e:
                print(f"[SHADER] Failed to release '{prog.label}': {e}")

    def release(self) -> None:
        for shader_id in {k[0] for k in self._shader_cache}:
            self.invalidate(shader_id)
