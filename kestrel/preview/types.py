# kestrel/preview/types.py
"""
Already-decoded inputs to the preview renderer.

Loaders own parsing; these records only describe what the renderer draws.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np


class Axis(str, Enum):
    X = "x"
    Y = "y"
    Z = "z"


class MaterialTextureUsage(Enum):
    UNKNOWN = "Unknown"
    ALBEDO = "Albedo"
    DIFFUSE = "Diffuse"
    SPECULAR = "Specular"
    NORMAL = "Normal"
    EMISSIVE = "Emissive"
    GLOSS = "Gloss"
    ROUGHNESS = "Roughness"
    AMBIENT_OCCLUSION = "Ambient Occlusion"
    ANISOTROPY = "Anisotropy"
    CAVITY = "Cavity"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class Mesh:
    """Triangle mesh in model space."""

    positions: np.ndarray  # (n, 3) float32
    normals: np.ndarray  # (n, 3) float32
    faces: np.ndarray  # (f, 3) uint32 vertex indices
    uvs: Optional[np.ndarray] = None  # (n, 2) float32, first uv layer
    material: Optional[int] = None  # index into the model's material images

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    def interleaved(self) -> np.ndarray:
        """Vertices as (n, 8) float32 rows of position, normal, uv."""
        n = self.vertex_count
        if len(self.normals) != n:
            raise ValueError(f"Mesh has {n} positions but {len(self.normals)} normals")

        uvs = self.uvs if self.uvs is not None else np.zeros((n, 2), dtype=np.float32)
        if len(uvs) != n:
            raise ValueError(f"Mesh has {n} positions but {len(uvs)} uvs")

        return np.hstack(
            [
                np.asarray(self.positions, dtype=np.float32).reshape(n, 3),
                np.asarray(self.normals, dtype=np.float32).reshape(n, 3),
                np.asarray(uvs, dtype=np.float32).reshape(n, 2),
            ]
        ).astype(np.float32)


@dataclass(frozen=True)
class Bone:
    name: str
    parent: int  # -1 for roots
    world_position: Tuple[float, float, float]


@dataclass(frozen=True)
class Skeleton:
    bones: Tuple[Bone, ...] = ()

    def is_empty(self) -> bool:
        return not self.bones

    def __len__(self) -> int:
        return len(self.bones)


@dataclass(frozen=True)
class Model:
    meshes: List[Mesh] = field(default_factory=list)
    skeleton: Skeleton = field(default_factory=Skeleton)
    up_axis: Axis = Axis.Y
