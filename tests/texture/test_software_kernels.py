import numpy as np
import pytest

from kestrel.texture.formats import ImageFormat
from kestrel.texture.options import ConversionOptions, ImageConvertOptions
from kestrel.texture.software import (
    SoftwareConverter,
    convert_generic,
    reconstruct_z,
    scale_bias,
)


def _unit_disc_samples(n: int = 41) -> np.ndarray:
    xs = np.linspace(-1.0, 1.0, n, dtype=np.float32)
    x, y = np.meshgrid(xs, xs)
    inside = x * x + y * y <= 1.0
    pixels = np.zeros((int(inside.sum()), 1, 4), dtype=np.float32)
    pixels[:, 0, 0] = x[inside]
    pixels[:, 0, 1] = y[inside]
    return pixels


def test_unorm_snorm_round_trip():
    rng = np.random.default_rng(7)
    pixels = rng.random((16, 16, 4), dtype=np.float32)

    to_snorm = convert_generic(pixels, ConversionOptions(input_unorm=True, output_snorm=True))
    back = convert_generic(to_snorm, ConversionOptions(input_snorm=True, output_unorm=True))

    assert to_snorm.min() >= -1.0 and to_snorm.max() <= 1.0
    np.testing.assert_allclose(back, pixels, atol=1e-6)


@pytest.mark.parametrize(
    "options",
    [
        ConversionOptions(),
        ConversionOptions(input_unorm=True, output_unorm=True),
        ConversionOptions(input_snorm=True, output_snorm=True),
    ],
)
def test_generic_passthrough(options):
    pixels = np.array([[[0.1, 0.2, 0.3, 0.4]]], dtype=np.float32)

    np.testing.assert_array_equal(convert_generic(pixels, options), pixels)


def test_generic_touches_alpha():
    pixels = np.array([[[0.0, 0.5, 1.0, 1.0]]], dtype=np.float32)
    out = convert_generic(pixels, ConversionOptions(input_unorm=True, output_snorm=True))

    np.testing.assert_allclose(out[0, 0], [-1.0, 0.0, 1.0, 1.0])


def test_reconstruct_z_is_unit_length_with_positive_z():
    pixels = _unit_disc_samples()
    out = reconstruct_z(pixels, ConversionOptions())

    lengths = np.linalg.norm(out[..., :3], axis=-1)
    np.testing.assert_allclose(lengths, 1.0, atol=1e-5)
    assert (out[..., 2] >= 0.0).all()
    assert (out[..., 3] == 1.0).all()


def test_reconstruct_z_clamps_out_of_range_input():
    pixels = np.array([[[1.0, 1.0, 0.0, 0.0]]], dtype=np.float32)
    out = reconstruct_z(pixels, ConversionOptions())

    assert out[0, 0, 2] == 0.0
    np.testing.assert_allclose(out[0, 0, :2], [np.sqrt(0.5)] * 2, atol=1e-6)


def test_reconstruct_z_from_unorm_center():
    pixels = np.array([[[0.5, 0.5, 0.0, 0.3]]], dtype=np.float32)
    out = reconstruct_z(pixels, ConversionOptions(input_unorm=True, output_unorm=True))

    np.testing.assert_allclose(out[0, 0], [0.5, 0.5, 1.0, 1.0], atol=1e-6)


def test_reconstruct_z_invert_y_signed():
    pixels = _unit_disc_samples()
    plain = reconstruct_z(pixels, ConversionOptions())
    flipped = reconstruct_z(pixels, ConversionOptions(invert_y=True))

    np.testing.assert_allclose(flipped[..., 1], -plain[..., 1], atol=1e-7)
    np.testing.assert_array_equal(flipped[..., [0, 2, 3]], plain[..., [0, 2, 3]])


def test_reconstruct_z_invert_y_unorm_mirrors():
    pixels = _unit_disc_samples() * 0.5 + 0.5
    base = ConversionOptions(input_unorm=True, output_unorm=True)
    plain = reconstruct_z(pixels, base)
    flipped = reconstruct_z(
        pixels, ConversionOptions(input_unorm=True, output_unorm=True, invert_y=True)
    )

    np.testing.assert_allclose(flipped[..., 1], 1.0 - plain[..., 1], atol=1e-6)


def test_scale_bias_example():
    pixels = np.array([[[0.5, 0.5, 0.5, 0.25]]], dtype=np.float32)
    out = scale_bias(pixels, ConversionOptions(scale=2.0, bias=-1.0))

    np.testing.assert_allclose(out[0, 0], [0.0, 0.0, 0.0, 0.25])


def test_scale_bias_ignores_domain_flags():
    pixels = np.array([[[0.25, 0.5, 0.75, 1.0]]], dtype=np.float32)
    plain = scale_bias(pixels, ConversionOptions(scale=3.0, bias=0.5))
    flagged = scale_bias(
        pixels, ConversionOptions(input_unorm=True, output_snorm=True, scale=3.0, bias=0.5)
    )

    np.testing.assert_array_equal(plain, flagged)


def test_software_converter_reconstructs_normal_map():
    converter = SoftwareConverter(1, 1, ImageFormat.R8G8_UNORM, ImageFormat.R8G8B8A8_UNORM)
    converter.set_options(ImageConvertOptions.reconstruct_z())

    assert converter.convert(bytes([128, 128])) == bytes([128, 128, 255, 255])


def test_software_converter_unorm_to_snorm():
    converter = SoftwareConverter(
        1, 1, ImageFormat.R8G8B8A8_UNORM, ImageFormat.R8G8B8A8_SNORM
    )
    out = np.frombuffer(converter.convert(bytes([255, 0, 255, 255])), dtype=np.int8)

    assert out.tolist() == [127, -127, 127, 127]


def test_software_converter_srgb_to_unorm_linearizes():
    converter = SoftwareConverter(
        1, 1, ImageFormat.R8G8B8A8_UNORM_SRGB, ImageFormat.R8G8B8A8_UNORM
    )

    assert converter.convert(bytes([128, 128, 128, 255])) == bytes([55, 55, 55, 255])


def test_software_converter_unorm_to_srgb_encodes():
    converter = SoftwareConverter(
        1, 1, ImageFormat.R8G8B8A8_UNORM, ImageFormat.R8G8B8A8_UNORM_SRGB
    )
    out = converter.convert(bytes([55, 55, 55, 255]))

    assert all(abs(v - 128) <= 1 for v in out[:3])
    assert out[3] == 255
