# kestrel/preview/shading.py
"""
Lighting constants and host-side mirrors of the preview fragment math.

The constants here are compiled into the GLSL as defines, so the shaders and
these functions share one set of numbers.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from kestrel.graphics.shaders.shader_manager import ShaderDefine
from kestrel.texture.colorspace import SRGB_THRESHOLD, srgb_to_linear

AMBIENT = 0.1

# 0xA1 gray, the same neutral used for meshes without a material image.
DEFAULT_MATERIAL: Tuple[float, float, float] = (0xA1 / 255.0,) * 3

BONE_COLOR: Tuple[float, float, float] = (0.153, 0.608, 0.831)

def _vec3_literal(v: Tuple[float, float, float]) -> str:
    return "vec3({:.6f}, {:.6f}, {:.6f})".format(*v)


def shading_defines() -> Tuple[ShaderDefine, ...]:
    return (
        ShaderDefine("AMBIENT", f"{AMBIENT:.6f}"),
        ShaderDefine("DEFAULT_MATERIAL", _vec3_literal(DEFAULT_MATERIAL)),
        ShaderDefine("BONE_COLOR", _vec3_literal(BONE_COLOR)),
    )


def diffuse_intensity(normal, light_dir, *, cull: bool = True) -> float:
    n = np.asarray(normal, dtype=np.float32)
    d = float(np.dot(n, np.asarray(light_dir, dtype=np.float32)))
    if not cull:
        d = abs(d)
    return max(d, 0.0)


def shade(
    normal,
    light_dir,
    albedo=None,
    *,
    default_shaded: bool = False,
    srgb: bool = False,
    cull: bool = True,
) -> np.ndarray:
    """
    Color of one mesh fragment. `normal` and `light_dir` are normalized
    here, as the fragment stage does.
    """
    n = np.asarray(normal, dtype=np.float32)
    light = np.asarray(light_dir, dtype=np.float32)
    n = n / np.linalg.norm(n)
    light = light / np.linalg.norm(light)

    diffuse = diffuse_intensity(n, light, cull=cull)

    if default_shaded or albedo is None:
        base = np.asarray(DEFAULT_MATERIAL, dtype=np.float32)
    elif srgb:
        base = srgb_to_linear(np.asarray(albedo, dtype=np.float32)[:3])
    else:
        base = np.asarray(albedo, dtype=np.float32)[:3]

    rgb = base * (AMBIENT + diffuse)
    return np.append(rgb, 1.0).astype(np.float32)
