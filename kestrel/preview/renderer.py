# kestrel/preview/renderer.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import moderngl
import numpy as np

from kestrel.gpu.instance import GPUInstance, gpu_instance
from kestrel.graphics.utils.uniforms import CAMERA_BINDING, CAMERA_UNIFORM_SIZE
from kestrel.math import create_rotation_x, create_rotation_z, identity
from kestrel.preview.camera import CameraUniform, PreviewCamera
from kestrel.preview.grid import GridRender
from kestrel.preview.image import RenderImage
from kestrel.preview.material import RenderMaterial
from kestrel.preview.model import RenderModel
from kestrel.preview.settings import PreviewSettings
from kestrel.preview.types import Axis, MaterialTextureUsage, Model
from kestrel.texture.image import Image

RenderType = Union[RenderModel, RenderImage, RenderMaterial]

# Orthographic zoom in percent.
SCALE_STEP = 3
SCALE_MIN = 0
SCALE_MAX = 200

ZOOM_SPEED = 0.5


def up_axis_matrix(axis: Axis) -> np.ndarray:
    """Model matrix that stands a model with the given up axis on +Y."""
    if axis is Axis.X:
        return create_rotation_z(90.0)
    if axis is Axis.Z:
        return create_rotation_x(-90.0)
    return identity()


def fit_scale(width: float, height: float, image_width: int, image_height: int) -> int:
    """Largest percent scale, at most 100, that fits the image in the viewport."""
    scale = min(width / image_width, height / image_height)
    return min(100, int(scale * 100.0))


class PreviewRenderer:
    """
    Offscreen renderer for asset previews.

    Draws into a multisampled color + depth target, resolves it, and hands
    back RGBA8 pixels top row first. The camera block is written once per
    change and shared by every pipeline through binding 0.
    """

    def __init__(
        self,
        settings: PreviewSettings | None = None,
        *,
        instance: GPUInstance | None = None,
    ) -> None:
        self.settings = settings or PreviewSettings()
        self.instance = instance or gpu_instance()
        self.ctx = self.instance.ctx

        self.wireframe = False
        self.show_bones = self.settings.show_bones
        self.show_grid = self.settings.show_grid

        self.width = max(1, self.settings.initial_size)
        self.height = max(1, self.settings.initial_size)
        self.far_clip = self.settings.far_clip

        orbit = self.settings.orbit
        self.camera = PreviewCamera(orbit.theta, orbit.phi, orbit.radius)
        self.scale = 100

        self.render_type: Optional[RenderType] = None
        self.render_name: Optional[str] = None

        self.camera_ubo = self.ctx.buffer(reserve=CAMERA_UNIFORM_SIZE)
        self.uniform: CameraUniform | None = None

        self.grid = GridRender(
            self.instance, size=self.settings.grid_size, step=self.settings.grid_step
        )

        self.samples = self._sample_count()
        self._create_targets()
        self._update_camera()

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def _sample_count(self) -> int:
        samples = min(self.settings.msaa_samples, self.ctx.max_samples)
        return samples if samples > 1 else 0

    def _create_targets(self) -> None:
        size = (self.width, self.height)

        self.msaa_color = self.ctx.renderbuffer(size, 4, samples=self.samples)
        self.msaa_depth = self.ctx.depth_renderbuffer(size, samples=self.samples)
        self.msaa_fbo = self.ctx.framebuffer(
            color_attachments=[self.msaa_color], depth_attachment=self.msaa_depth
        )

        self.output_texture = self.ctx.texture(size, 4)
        self.output_fbo = self.ctx.framebuffer(color_attachments=[self.output_texture])

    def _release_targets(self) -> None:
        for obj in (
            self.output_fbo,
            self.output_texture,
            self.msaa_fbo,
            self.msaa_depth,
            self.msaa_color,
        ):
            obj.release()

    # ------------------------------------------------------------------
    # Preview content
    # ------------------------------------------------------------------

    def _replace(self, render: Optional[RenderType], name: Optional[str]) -> None:
        if self.render_type is not None:
            self.render_type.release()
        self.render_type = render
        self.render_name = name

    def _fit_orthographic(self, width: int, height: int) -> None:
        if width == 0 or height == 0:
            self.scale = 100
        else:
            self.scale = fit_scale(self.width, self.height, width, height)
        self.camera.set_orthographic((float(width), float(height), self.scale / 100.0))

    def set_preview_image(self, name: str, image: Image) -> None:
        render = RenderImage(self.instance, image)

        self._fit_orthographic(render.width, render.height)
        self._replace(render, name)
        self._update_camera()

    def set_preview_material(
        self, name: str, images: Sequence[Tuple[MaterialTextureUsage, Image]]
    ) -> None:
        render = RenderMaterial(self.instance, images)

        self._fit_orthographic(render.width, render.height)
        self._replace(render, name)
        self._update_camera()

    def set_preview_model(
        self,
        name: str,
        model: Model,
        materials: Sequence[Optional[Image]] = (),
        *,
        srgb: Optional[bool] = None,
    ) -> None:
        render = RenderModel(
            self.instance,
            model,
            materials,
            culling=self.settings.culling,
            srgb=srgb,
        )

        self.camera.set_orthographic(None)
        self.camera.set_model_matrix(up_axis_matrix(model.up_axis))
        self._replace(render, name)
        self._update_camera()

    def clear_preview(self) -> None:
        self._replace(None, None)
        self.camera.set_orthographic(None)
        self._update_camera()

    def is_empty_preview(self) -> bool:
        return self.render_type is None

    # ------------------------------------------------------------------
    # View controls
    # ------------------------------------------------------------------

    def resize(self, width: float, height: float, far_clip: float | None = None) -> None:
        width = max(1, int(width))
        height = max(1, int(height))
        far_clip = self.far_clip if far_clip is None else far_clip

        if (width, height, far_clip) == (self.width, self.height, self.far_clip):
            return

        self.far_clip = far_clip
        if (width, height) != (self.width, self.height):
            self._release_targets()
            self.width = width
            self.height = height
            self._create_targets()

        self._update_camera()

    def cycle_material(self) -> None:
        if not isinstance(self.render_type, RenderMaterial):
            return

        material = self.render_type
        material.next()
        self._fit_orthographic(material.width, material.height)
        self._update_camera()

    def toggle_wireframe(self) -> None:
        self.wireframe = not self.wireframe

    def toggle_bones(self) -> None:
        self.show_bones = not self.show_bones

    def toggle_grid(self) -> None:
        self.show_grid = not self.show_grid

    def toggle_shaded(self) -> None:
        self.camera.toggle_shaded()
        self._update_camera()

    def reset_view(self) -> None:
        if self.camera.is_orthographic:
            return

        orbit = self.settings.orbit
        self.camera.reset(orbit.theta, orbit.phi, orbit.radius)
        self._update_camera()

    def scroll_delta(self, delta: float) -> None:
        if self.camera.is_orthographic:
            step = SCALE_STEP if delta > 0 else -SCALE_STEP
            self.scale = max(SCALE_MIN, min(SCALE_MAX, self.scale + step))
            self.camera.set_orthographic_scale(self.scale / 100.0)
        else:
            self.camera.zoom(delta * ZOOM_SPEED)
        self._update_camera()

    def rotate(self, theta: float, phi: float) -> None:
        self.camera.rotate(theta, phi)
        self._update_camera()

    def pan(self, x: float, y: float) -> None:
        self.camera.pan(x, y)
        self._update_camera()

    def zoom(self, distance: float) -> None:
        self.camera.zoom(distance)
        self._update_camera()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def statistics(self) -> List[Tuple[str, str]]:
        name = self.render_name if self.render_name is not None else "N/A"
        render = self.render_type

        if isinstance(render, RenderModel):
            return [
                ("Name", name),
                ("Meshes", str(render.mesh_count)),
                ("Verts", str(render.vertex_count)),
                ("Tris", str(render.face_count)),
                ("Bones", str(render.bone_count)),
            ]

        if isinstance(render, RenderImage):
            return [
                ("Name", name),
                ("Width", str(render.width)),
                ("Height", str(render.height)),
                ("Scale", f"{self.scale}%"),
            ]

        if isinstance(render, RenderMaterial):
            if render.is_empty():
                position = "0 of 0"
            else:
                position = f"{render.index + 1} of {len(render)}"
            result = [("Name", name), ("Image", position)]

            if render.is_error():
                result.append(("Status", "Unable to preview this image"))
            else:
                result.extend(
                    [
                        ("Usage", render.usage),
                        ("Width", str(render.width)),
                        ("Height", str(render.height)),
                        ("Scale", f"{self.scale}%"),
                    ]
                )
            return result

        return [("Name", "N/A")]

    @property
    def srgb(self) -> bool:
        return self.render_type.srgb if self.render_type is not None else False

    def _update_camera(self) -> None:
        self.uniform = self.camera.uniform(
            self.width, self.height, srgb=self.srgb, far_clip=self.far_clip
        )
        self.camera_ubo.write(self.uniform.pack())

    def render(self) -> Tuple[int, int, bytes]:
        """Draw one frame; returns (width, height, RGBA8 pixels top row first)."""
        ctx = self.ctx

        self.msaa_fbo.use()
        ctx.viewport = (0, 0, self.width, self.height)
        ctx.clear(*self.settings.clear_color, depth=1.0)
        ctx.depth_func = "<"

        self.camera_ubo.bind_to_uniform_block(CAMERA_BINDING)

        render = self.render_type
        if isinstance(render, RenderModel):
            if self.show_grid:
                self.grid.draw(ctx)
            render.draw(ctx, show_bones=self.show_bones, wireframe=self.wireframe)
        elif isinstance(render, (RenderImage, RenderMaterial)):
            render.draw(ctx)
        elif self.show_grid:
            self.grid.draw(ctx)

        ctx.copy_framebuffer(self.output_fbo, self.msaa_fbo)

        raw = self.output_fbo.read(components=4, alignment=1)
        pixels = np.frombuffer(raw, dtype=np.uint8).reshape(self.height, self.width, 4)
        return self.width, self.height, np.ascontiguousarray(pixels[::-1]).tobytes()

    def release(self) -> None:
        self._replace(None, None)
        self.grid.release()
        self._release_targets()
        self.camera_ubo.release()
