# kestrel/graphics/shaders/program_types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import moderngl


@dataclass(frozen=True, slots=True)
class ShaderStages:
    """
    All stages for a single GPU program.

    Each field is either a path relative to the shader root or raw GLSL.
    """

    vertex: Optional[str] = None
    fragment: Optional[str] = None


@dataclass(frozen=True)
class ProgramHandle:
    """A compiled program variant and the label it is reported under."""

    program: moderngl.Program
    label: str
