# kestrel/preview/__init__.py
from kestrel.preview.camera import CameraUniform, PreviewCamera
from kestrel.preview.grid import GridRender, build_grid_vertices
from kestrel.preview.image import RenderImage
from kestrel.preview.material import RenderMaterial
from kestrel.preview.mesh import MaterialTexture, RenderMesh
from kestrel.preview.model import RenderModel
from kestrel.preview.renderer import PreviewRenderer
from kestrel.preview.settings import OrbitSettings, PreviewSettings
from kestrel.preview.skeleton import RenderSkeleton
from kestrel.preview.types import (
    Axis,
    Bone,
    MaterialTextureUsage,
    Mesh,
    Model,
    Skeleton,
)

__all__ = [
    "Axis",
    "Bone",
    "CameraUniform",
    "GridRender",
    "MaterialTexture",
    "MaterialTextureUsage",
    "Mesh",
    "Model",
    "OrbitSettings",
    "PreviewCamera",
    "PreviewRenderer",
    "PreviewSettings",
    "RenderImage",
    "RenderMaterial",
    "RenderMesh",
    "RenderModel",
    "RenderSkeleton",
    "Skeleton",
    "build_grid_vertices",
]
