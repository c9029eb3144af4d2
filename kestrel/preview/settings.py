# kestrel/preview/settings.py
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OrbitSettings:
    """Where the camera sits after a reset."""

    theta: float = 0.5 * math.pi
    phi: float = 0.45 * math.pi
    radius: float = 100.0


@dataclass(frozen=True, slots=True)
class PreviewSettings:
    """Preview renderer configuration."""

    initial_size: int = 256
    far_clip: float = 10000.0
    msaa_samples: int = 4
    clear_color: tuple[float, float, float, float] = (0.066, 0.066, 0.066, 1.0)

    grid_size: float = 120.0
    grid_step: float = 2.0

    # Back-face culling for meshes. Off draws both sides lit.
    culling: bool = False

    show_bones: bool = True
    show_grid: bool = True

    orbit: OrbitSettings = OrbitSettings()
