import numpy as np
import pytest

from kestrel.graphics.shaders.shader_manager import SHADER_ROOT
from kestrel.preview.shading import (
    AMBIENT,
    DEFAULT_MATERIAL,
    SRGB_THRESHOLD,
    diffuse_intensity,
    shade,
    shading_defines,
    srgb_to_linear,
)


def test_srgb_endpoints():
    assert srgb_to_linear(0.0) == pytest.approx(0.0)
    assert srgb_to_linear(1.0) == pytest.approx(1.0, abs=1e-6)
    assert srgb_to_linear(SRGB_THRESHOLD) == pytest.approx(SRGB_THRESHOLD / 12.92)


def test_srgb_is_monotonic():
    values = srgb_to_linear(np.linspace(0.0, 1.0, 1025))

    assert np.all(np.diff(values) > 0.0)
    assert np.all(values <= np.linspace(0.0, 1.0, 1025) + 1e-6)


def test_srgb_midpoint():
    assert srgb_to_linear(0.5) == pytest.approx(0.21404, abs=1e-4)


def test_default_shaded_ignores_texture():
    normal = (0.0, 1.0, 0.0)
    light = (0.0, 1.0, 0.0)

    red = shade(normal, light, (1.0, 0.0, 0.0, 1.0), default_shaded=True)
    blue = shade(normal, light, (0.0, 0.0, 1.0, 1.0), default_shaded=True)

    np.testing.assert_allclose(red, blue)
    np.testing.assert_allclose(red[:3], np.array(DEFAULT_MATERIAL) * (AMBIENT + 1.0), rtol=1e-6)


def test_facing_light_gives_ambient_plus_one():
    out = shade((0.0, 0.0, 2.0), (0.0, 0.0, 5.0), (0.5, 0.25, 1.0, 1.0))

    np.testing.assert_allclose(out, (0.55, 0.275, 1.1, 1.0), rtol=1e-6)


def test_srgb_albedo_is_linearized():
    out = shade((0.0, 1.0, 0.0), (0.0, 1.0, 0.0), (0.5, 0.5, 0.5, 1.0), srgb=True)

    np.testing.assert_allclose(out[:3], srgb_to_linear(0.5) * (AMBIENT + 1.0), rtol=1e-5)


@pytest.mark.parametrize(
    "normal",
    [(0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (1.0, 1.0, 0.0), (0.3, -0.8, 0.5)],
)
def test_culling_off_never_darker(normal):
    light = np.array([0.2, 0.9, 0.1])
    light = light / np.linalg.norm(light)
    n = np.array(normal) / np.linalg.norm(normal)

    culled = diffuse_intensity(n, light, cull=True)
    double_sided = diffuse_intensity(n, light, cull=False)

    assert double_sided >= culled
    if np.dot(n, light) >= 0.0:
        assert double_sided == pytest.approx(culled)


def test_back_face_culled_is_ambient_only():
    out = shade((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 1.0, 1.0), cull=True)

    np.testing.assert_allclose(out[:3], AMBIENT, rtol=1e-6)


def test_shading_defines():
    defines = {d.key: d.value for d in shading_defines()}

    assert defines["AMBIENT"] == "0.100000"
    assert defines["DEFAULT_MATERIAL"] == "vec3(0.631373, 0.631373, 0.631373)"
    assert defines["BONE_COLOR"] == "vec3(0.153000, 0.608000, 0.831000)"


def test_glsl_uses_same_threshold():
    source = (SHADER_ROOT / "include" / "srgb.glsl").read_text()

    assert "0.04045" in source
    assert "12.92" in source
    assert "2.4" in source
