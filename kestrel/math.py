# kestrel/math.py
"""
Matrix helpers for the preview camera.

All matrices are row-major NumPy arrays using the column-vector convention
(``clip = projection @ view @ model @ position``). Use
``kestrel.graphics.utils.uniforms.pack_mat4`` to upload them to GLSL.
"""

import math
from typing import Sequence

import numpy as np

Vec3 = Sequence[float]


def deg_to_rad(d: float) -> float:
    return d * math.pi / 180.0


def normalize(v: np.ndarray) -> np.ndarray:
    mag = float(np.linalg.norm(v))
    if mag == 0:
        return v
    return v / mag


def identity() -> np.ndarray:
    return np.eye(4, dtype=np.float32)


def create_translation(offset: Vec3) -> np.ndarray:
    mat = np.eye(4, dtype=np.float32)
    mat[0, 3] = offset[0]
    mat[1, 3] = offset[1]
    mat[2, 3] = offset[2]
    return mat


def create_scale(scale: Vec3) -> np.ndarray:
    return np.diag([scale[0], scale[1], scale[2], 1.0]).astype(np.float32)


def create_rotation_x(degrees: float) -> np.ndarray:
    r = deg_to_rad(degrees)
    c, s = math.cos(r), math.sin(r)

    mat = np.eye(4, dtype=np.float32)
    mat[1, 1] = c
    mat[1, 2] = -s
    mat[2, 1] = s
    mat[2, 2] = c
    return mat


def create_rotation_z(degrees: float) -> np.ndarray:
    r = deg_to_rad(degrees)
    c, s = math.cos(r), math.sin(r)

    mat = np.eye(4, dtype=np.float32)
    mat[0, 0] = c
    mat[0, 1] = -s
    mat[1, 0] = s
    mat[1, 1] = c
    return mat


def create_look_at(eye: Vec3, target: Vec3, up: Vec3) -> np.ndarray:
    """
    Constructs a right-handed View Matrix (World -> Camera Space).

    The camera looks down its local -Z axis towards `target`.
    """
    eye_v = np.asarray(eye, dtype=np.float64)
    forward = normalize(np.asarray(target, dtype=np.float64) - eye_v)
    right = normalize(np.cross(forward, np.asarray(up, dtype=np.float64)))
    true_up = np.cross(right, forward)

    view = np.eye(4, dtype=np.float64)
    view[0, :3] = right
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[0, 3] = -np.dot(right, eye_v)
    view[1, 3] = -np.dot(true_up, eye_v)
    view[2, 3] = np.dot(forward, eye_v)
    return view.astype(np.float32)


def create_perspective_projection(
    fov_deg: float, aspect: float, near: float, far: float
) -> np.ndarray:
    """
    Creates a standard OpenGL Perspective Projection Matrix.
    fov_deg: Field of View in Degrees (Vertical)
    aspect: Width / Height
    near: Distance to near plane
    far: Distance to far plane
    """
    fov_rad = math.radians(fov_deg)
    tan_half_fov = math.tan(fov_rad / 2.0)

    # Avoid division by zero
    if tan_half_fov == 0:
        tan_half_fov = 0.001
    if near == far:
        far += 0.001
    if aspect == 0:
        aspect = 1.0

    mat = np.zeros((4, 4), dtype=np.float32)

    mat[0, 0] = 1.0 / (aspect * tan_half_fov)
    mat[1, 1] = 1.0 / tan_half_fov

    mat[2, 2] = (far + near) / (near - far)
    mat[2, 3] = (2.0 * far * near) / (near - far)

    # Perspective Division (w = -z)
    mat[3, 2] = -1.0

    return mat


def create_orthographic_projection(
    left: float,
    right: float,
    bottom: float,
    top: float,
    near: float,
    far: float,
) -> np.ndarray:
    """Standard glOrtho matrix. Passing bottom > top gives a y-down space."""
    mat = np.eye(4, dtype=np.float32)

    mat[0, 0] = 2.0 / (right - left)
    mat[1, 1] = 2.0 / (top - bottom)
    mat[2, 2] = -2.0 / (far - near)

    mat[0, 3] = -(right + left) / (right - left)
    mat[1, 3] = -(top + bottom) / (top - bottom)
    mat[2, 3] = -(far + near) / (far - near)

    return mat


def exact_inverse(mat: np.ndarray) -> np.ndarray:
    """Invert in float64 before narrowing, so M @ inv(M) stays within float32 eps."""
    return np.linalg.inv(mat.astype(np.float64)).astype(np.float32)
