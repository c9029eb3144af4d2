# kestrel/gpu/settings.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True, slots=True)
class GPUSettings:
    """
    Policy for the headless OpenGL context shared by converters and previews.

    Attributes:
        require: Minimum OpenGL version code (330 = 3.3 core).
        backend: Optional ModernGL standalone backend, e.g. "egl" on
            display-less Linux machines. None lets ModernGL pick.
        include_paths: Extra directories searched for shader stages and
            `#include` files before the packaged shaders.
    """

    require: int = 330
    backend: Optional[str] = None
    include_paths: Sequence[str] = ()
