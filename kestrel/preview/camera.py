# kestrel/preview/camera.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from kestrel.graphics.utils.uniforms import (
    CAMERA_UNIFORM_SIZE,
    pack_bool,
    pack_mat4,
    pack_vec3_std140,
    pad_std140,
)
from kestrel.math import (
    create_look_at,
    create_orthographic_projection,
    create_perspective_projection,
    create_scale,
    create_translation,
    exact_inverse,
    identity,
    normalize,
)

FOV_DEGREES = 65.0
NEAR_CLIP = 0.1

# Radius the camera jumps back to when zooming through the target.
ZOOM_RESET_RADIUS = 30.0

# Smallest orthographic scale used for the view matrix; zero has no inverse.
MIN_ORTHO_SCALE = 0.01


@dataclass(frozen=True, slots=True)
class CameraUniform:
    """
    Per-frame transform record shared by the mesh, grid, bone and image
    pipelines.
    """

    target: np.ndarray
    view_matrix: np.ndarray
    inverse_view_matrix: np.ndarray
    projection_matrix: np.ndarray
    model_matrix: np.ndarray
    inverse_model_matrix: np.ndarray
    default_shaded: bool = False
    srgb: bool = False

    @classmethod
    def from_matrices(
        cls,
        *,
        target,
        view: np.ndarray,
        projection: np.ndarray,
        model: np.ndarray,
        default_shaded: bool = False,
        srgb: bool = False,
    ) -> CameraUniform:
        return cls(
            target=np.asarray(target, dtype=np.float32).reshape(3),
            view_matrix=np.asarray(view, dtype=np.float32),
            inverse_view_matrix=exact_inverse(view),
            projection_matrix=np.asarray(projection, dtype=np.float32),
            model_matrix=np.asarray(model, dtype=np.float32),
            inverse_model_matrix=exact_inverse(model),
            default_shaded=default_shaded,
            srgb=srgb,
        )

    @property
    def camera_position(self) -> np.ndarray:
        """World position the mesh pipeline lights from."""
        return self.inverse_view_matrix[:3, 3]

    def pack(self) -> bytes:
        data = b"".join(
            [
                pack_vec3_std140(*self.target),
                pack_mat4(self.view_matrix),
                pack_mat4(self.inverse_view_matrix),
                pack_mat4(self.projection_matrix),
                pack_mat4(self.model_matrix),
                pack_mat4(self.inverse_model_matrix),
                pack_bool(self.default_shaded),
                pack_bool(self.srgb),
            ]
        )
        data = pad_std140(data)
        assert len(data) == CAMERA_UNIFORM_SIZE
        return data


class PreviewCamera:
    """
    Orbit camera around a target point.

    `theta` and `phi` are the azimuth and polar angle in radians; `up` is
    +1 or -1 and flips when the orbit crosses a pole.
    """

    def __init__(self, theta: float, phi: float, radius: float) -> None:
        self.theta = theta
        self.phi = phi
        self.radius = radius
        self.up = 1.0
        self.target = np.zeros(3, dtype=np.float32)
        self.model_matrix = identity()
        self.default_shaded = False
        # (width, height, scale) of the previewed image.
        self.orthographic: Optional[Tuple[float, float, float]] = None

    @property
    def is_orthographic(self) -> bool:
        return self.orthographic is not None

    def set_orthographic(self, orthographic: Optional[Tuple[float, float, float]]) -> None:
        self.orthographic = orthographic

    def set_orthographic_scale(self, scale: float) -> None:
        if self.orthographic is not None:
            width, height, _ = self.orthographic
            self.orthographic = (width, height, scale)

    def set_model_matrix(self, model: np.ndarray) -> None:
        self.model_matrix = np.asarray(model, dtype=np.float32)

    def toggle_shaded(self) -> None:
        self.default_shaded = not self.default_shaded

    def to_cartesian(self) -> np.ndarray:
        return np.array(
            [
                self.radius * math.sin(self.phi) * math.sin(self.theta),
                self.radius * math.cos(self.phi),
                self.radius * math.sin(self.phi) * math.cos(self.theta),
            ],
            dtype=np.float32,
        )

    @property
    def position(self) -> np.ndarray:
        return self.target + self.to_cartesian()

    def _look(self) -> np.ndarray:
        return normalize(self.target - self.position)

    def reset(self, theta: float, phi: float, radius: float) -> None:
        self.theta = theta
        self.phi = phi
        self.radius = radius
        self.up = 1.0
        self.target = np.zeros(3, dtype=np.float32)

        if self.radius <= 0.0:
            self._push_target()

    def rotate(self, theta: float, phi: float) -> None:
        if self.up > 0.0:
            self.theta += theta
        else:
            self.theta -= theta

        self.phi += phi

        if self.phi > math.pi:
            self.phi -= math.tau
        elif self.phi < -math.tau:
            self.phi += math.tau

        if 0.0 < self.phi < math.pi or -math.tau < self.phi < -math.pi:
            self.up = 1.0
        else:
            self.up = -1.0

    def zoom(self, distance: float) -> None:
        self.radius -= distance

        if self.radius <= 0.0:
            self._push_target()

    def _push_target(self) -> None:
        # Zooming through the target carries it forward instead.
        self.radius = ZOOM_RESET_RADIUS
        self.target = (self.target + self._look() * ZOOM_RESET_RADIUS).astype(np.float32)

    def pan(self, x: float, y: float) -> None:
        look = self._look()
        world_up = np.array([0.0, self.up, 0.0], dtype=np.float32)

        right = np.cross(look, world_up)
        up = np.cross(look, right)

        self.target = (self.target + right * x + up * y).astype(np.float32)

    def view_projection(
        self, width: float, height: float, far_clip: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        if self.orthographic is not None:
            o_width, o_height, o_scale = self.orthographic
            scale = max(o_scale, MIN_ORTHO_SCALE)

            projection = create_orthographic_projection(0.0, width, height, 0.0, -1.0, 1.0)

            center_x = (width - o_width * scale) / 2.0
            center_y = (height - o_height * scale) / 2.0
            view = create_translation((center_x, center_y, 0.0)) @ create_scale(
                (scale, scale, 1.0)
            )
            return view, projection

        projection = create_perspective_projection(
            FOV_DEGREES, width / height, NEAR_CLIP, far_clip
        )
        view = create_look_at(self.position, self.target, (0.0, self.up, 0.0))
        return view, projection

    def uniform(
        self,
        width: float,
        height: float,
        *,
        srgb: bool = False,
        far_clip: float = 10000.0,
    ) -> CameraUniform:
        view, projection = self.view_projection(width, height, far_clip)
        return CameraUniform.from_matrices(
            target=self.target,
            view=view,
            projection=projection,
            model=self.model_matrix,
            default_shaded=self.default_shaded,
            srgb=srgb,
        )
