import numpy as np
import pytest
from PIL import Image as PILImage

from kestrel.errors import (
    InvalidImageSize,
    InvalidMipMaps,
    InvalidOperation,
    UnsupportedFormatError,
)
from kestrel.texture import (
    ConvertBackend,
    Image,
    ImageConvertOptions,
    ImageFormat,
    Rect,
    ResizeAlgorithm,
)


def test_new_rejects_empty_size():
    with pytest.raises(InvalidImageSize):
        Image.new(0, 4, ImageFormat.R8G8B8A8_UNORM)


def test_with_mipmaps_rejects_zero():
    with pytest.raises(InvalidMipMaps):
        Image.with_mipmaps(4, 4, 0, ImageFormat.R8G8B8A8_UNORM)


def test_frame_size_includes_mips():
    image = Image.with_mipmaps(8, 8, 3, ImageFormat.R8G8B8A8_UNORM)

    assert image.frame_size() == 256 + 64 + 16
    assert image.frame_size_with_mipmaps(mipmaps=1) == 256


def test_frame_size_mips_stop_at_one_pixel():
    image = Image.with_mipmaps(4, 1, 4, ImageFormat.R8_UNORM)

    # 4x1, 2x1, 1x1, 1x1
    assert image.frame_size() == 4 + 2 + 1 + 1


def test_create_frame_zeroed():
    image = Image.new(2, 2, ImageFormat.R16G16_FLOAT)
    frame = image.create_frame()

    assert len(frame) == 16
    assert not any(frame.buffer)
    assert image.frames == [frame]
    assert image.size == 16


def test_from_rgba_is_four_by_four():
    image = Image.from_rgba(1, 2, 3, 4, srgb=True)

    assert (image.width, image.height) == (4, 4)
    assert image.format is ImageFormat.R8G8B8A8_UNORM_SRGB
    assert bytes(image.frames[0].buffer) == bytes([1, 2, 3, 4]) * 16


def test_from_rgba_f32_clamps_and_truncates():
    image = Image.from_rgba_f32(2.0, -1.0, 0.5, 1.0)

    assert image.format is ImageFormat.R8G8B8A8_UNORM
    assert bytes(image.frames[0].buffer[:4]) == bytes([255, 0, 127, 255])


def test_from_array_to_array():
    pixels = np.zeros((2, 3, 4), dtype=np.float32)
    pixels[0, 0] = (1.0, 0.0, 0.0, 1.0)
    pixels[1, 2] = (0.0, 0.0, 1.0, 0.5)

    image = Image.from_array(pixels, ImageFormat.R32G32B32A32_FLOAT)

    assert (image.width, image.height) == (3, 2)
    np.testing.assert_array_equal(image.to_array(), pixels)


def test_pil_round_trip():
    src = PILImage.new("RGBA", (2, 1))
    src.putpixel((0, 0), (255, 0, 0, 255))
    src.putpixel((1, 0), (0, 0, 255, 128))

    image = Image.from_pil(src, srgb=False)
    out = image.to_pil()

    assert image.format is ImageFormat.R8G8B8A8_UNORM
    assert out.getpixel((0, 0)) == (255, 0, 0, 255)
    assert out.getpixel((1, 0)) == (0, 0, 255, 128)


def test_to_pil_from_other_format():
    image = Image.new(1, 1, ImageFormat.B8G8R8A8_UNORM)
    image.create_frame().replace_buffer(bytes([10, 20, 30, 255]))

    assert image.to_pil().getpixel((0, 0)) == (30, 20, 10, 255)


def test_convert_same_format_is_noop():
    image = Image.with_mipmaps(4, 4, 3, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame()

    image.convert(ImageFormat.R8G8B8A8_UNORM, backend=ConvertBackend.SOFTWARE)

    assert image.mipmaps == 3
    assert len(image.frames[0]) == image.frame_size()


def test_convert_swizzle_keeps_mips():
    image = Image.with_mipmaps(2, 2, 2, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(bytes([1, 2, 3, 4]) * 5)

    image.convert(ImageFormat.B8G8R8A8_UNORM, backend=ConvertBackend.SOFTWARE)

    assert image.format is ImageFormat.B8G8R8A8_UNORM
    assert image.mipmaps == 2
    assert bytes(image.frames[0].buffer) == bytes([3, 2, 1, 4]) * 5


@pytest.mark.parametrize(
    "source, target",
    [
        (ImageFormat.R8G8B8A8_UINT, ImageFormat.R8G8B8A8_UNORM),
        (ImageFormat.R8G8B8A8_UNORM, ImageFormat.R8G8B8A8_UINT),
    ],
)
def test_convert_integer_formats_unsupported(source, target):
    image = Image.new(1, 1, source)
    image.create_frame()

    with pytest.raises(UnsupportedFormatError):
        image.convert(target, backend=ConvertBackend.SOFTWARE)


def test_convert_drops_mips_and_reencodes():
    image = Image.with_mipmaps(2, 2, 2, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(bytes([255, 0, 0, 255]) * 5)

    image.convert(ImageFormat.R32G32B32A32_FLOAT, backend=ConvertBackend.SOFTWARE)

    assert image.mipmaps == 1
    assert len(image.frames[0]) == 2 * 2 * 16
    np.testing.assert_allclose(image.to_array()[..., 0], 1.0)
    np.testing.assert_allclose(image.to_array()[..., 1], 0.0)


def test_convert_same_format_with_reconstruct_runs():
    image = Image.new(1, 1, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(bytes([128, 128, 0, 0]))

    image.convert(
        ImageFormat.R8G8B8A8_UNORM,
        ImageConvertOptions.reconstruct_z(),
        backend=ConvertBackend.SOFTWARE,
    )

    assert bytes(image.frames[0].buffer) == bytes([128, 128, 255, 255])


def test_convert_all_frames():
    image = Image.new(1, 1, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(bytes([0, 0, 0, 255]))
    image.create_frame().replace_buffer(bytes([255, 255, 255, 255]))

    image.convert(ImageFormat.R8G8B8A8_SNORM, backend=ConvertBackend.SOFTWARE)

    first = np.frombuffer(bytes(image.frames[0].buffer), dtype=np.int8)
    second = np.frombuffer(bytes(image.frames[1].buffer), dtype=np.int8)
    assert first.tolist() == [-127, -127, -127, 127]
    assert second.tolist() == [127, 127, 127, 127]


def test_to_pil_keeps_srgb_bytes():
    image = Image.new(1, 1, ImageFormat.B8G8R8A8_UNORM_SRGB)
    image.create_frame().replace_buffer(bytes([10, 128, 200, 255]))

    assert image.to_pil().getpixel((0, 0)) == (200, 128, 10, 255)


def test_convert_srgb_to_unorm_linearizes():
    image = Image.from_rgba(128, 128, 128, 255, srgb=True)

    image.convert(ImageFormat.R8G8B8A8_UNORM, backend=ConvertBackend.SOFTWARE)

    assert bytes(image.frames[0].buffer[:4]) == bytes([55, 55, 55, 255])


def test_convert_unorm_to_srgb_encodes():
    image = Image.from_rgba(55, 55, 55, 255)

    image.convert(ImageFormat.R8G8B8A8_UNORM_SRGB, backend=ConvertBackend.SOFTWARE)

    out = image.frames[0].buffer
    assert all(abs(v - 128) <= 1 for v in out[:3])
    assert out[3] == 255


def _checker_2x2():
    image = Image.new(2, 2, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(
        bytes([255, 0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255, 255, 255, 255, 255])
    )
    return image


def test_resize_nearest_duplicates_pixels():
    image = _checker_2x2()

    image.resize(4, 4, ResizeAlgorithm.NEAREST_NEIGHBOR)

    assert (image.width, image.height) == (4, 4)
    assert len(image.frames[0]) == 4 * 4 * 4
    pixels = np.frombuffer(bytes(image.frames[0].buffer), np.uint8).reshape(4, 4, 4)
    np.testing.assert_array_equal(pixels[:2, :2], [[[255, 0, 0, 255]] * 2] * 2)
    np.testing.assert_array_equal(pixels[:2, 2:], [[[0, 255, 0, 255]] * 2] * 2)
    np.testing.assert_array_equal(pixels[2:, :2], [[[0, 0, 255, 255]] * 2] * 2)
    np.testing.assert_array_equal(pixels[3, 3], [255, 255, 255, 255])


def test_resize_bicubic_keeps_solid_color():
    image = Image.with_mipmaps(4, 4, 3, ImageFormat.R8G8B8A8_UNORM)
    image.create_frame().replace_buffer(bytes([10, 20, 30, 255]) * (image.frame_size() // 4))

    image.resize(8, 2)

    assert image.mipmaps == 1
    assert bytes(image.frames[0].buffer) == bytes([10, 20, 30, 255]) * 16


def test_resize_float_image_every_frame():
    pixels = np.full((2, 2, 4), 0.25, dtype=np.float32)
    image = Image.from_array(pixels, ImageFormat.R32G32B32A32_FLOAT)
    image.create_frame().replace_buffer(bytes(image.frames[0].buffer))

    image.resize(3, 5, ResizeAlgorithm.BICUBIC)

    assert len(image.frames) == 2
    for i in range(2):
        out = image.to_array(i)
        assert out.shape == (5, 3, 4)
        np.testing.assert_allclose(out, 0.25, atol=1e-5)


@pytest.mark.parametrize("width, height", [(0, 4), (4, 0)])
def test_resize_to_zero_is_invalid(width, height):
    image = _checker_2x2()

    with pytest.raises(InvalidOperation):
        image.resize(width, height)

    assert (image.width, image.height) == (2, 2)


def _filled(width, height, value):
    image = Image.new(width, height, ImageFormat.R8_UNORM)
    image.create_frame().replace_buffer(bytes([value]) * (width * height))
    return image


def _grid(image):
    return np.frombuffer(bytes(image.frames[0].buffer), np.uint8).reshape(
        image.height, image.width
    )


def test_copy_rect():
    dest = _filled(4, 4, 0)
    source = Image.new(3, 3, ImageFormat.R8_UNORM)
    source.create_frame().replace_buffer(bytes(range(1, 10)))

    dest.copy_rect(source, Rect(1, 1, 2, 2), 1, 2)

    np.testing.assert_array_equal(
        _grid(dest),
        [
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 5, 6, 0],
            [0, 8, 9, 0],
        ],
    )


def test_copy_rect_clips_negative_destination():
    dest = _filled(3, 3, 0)
    source = Image.new(3, 3, ImageFormat.R8_UNORM)
    source.create_frame().replace_buffer(bytes(range(1, 10)))

    dest.copy_rect(source, Rect(0, 0, 3, 3), -1, -2)

    np.testing.assert_array_equal(
        _grid(dest),
        [
            [8, 9, 0],
            [0, 0, 0],
            [0, 0, 0],
        ],
    )


def test_copy_rect_clips_right_and_bottom():
    dest = _filled(3, 3, 0)
    source = _filled(4, 4, 7)

    dest.copy_rect(source, Rect(0, 0, 4, 4), 2, 1)

    np.testing.assert_array_equal(
        _grid(dest),
        [
            [0, 0, 0],
            [0, 0, 7],
            [0, 0, 7],
        ],
    )


def test_copy_rect_clipped_away_copies_nothing():
    dest = _filled(2, 2, 0)
    source = _filled(2, 2, 7)

    dest.copy_rect(source, Rect(0, 0, 2, 2), 5, 0)
    dest.copy_rect(source, Rect(2, 0, 2, 2), 0, 0)

    assert bytes(dest.frames[0].buffer) == bytes(4)


def test_copy_rect_format_mismatch():
    dest = _filled(2, 2, 0)

    with pytest.raises(UnsupportedFormatError):
        dest.copy_rect(_checker_2x2(), Rect(0, 0, 1, 1), 0, 0)


def test_copy_rect_frame_mismatch_and_bad_origin():
    dest = _filled(2, 2, 0)
    source = _filled(2, 2, 7)

    with pytest.raises(InvalidOperation):
        dest.copy_rect(source, Rect(3, 0, 1, 1), 0, 0)

    source.create_frame()
    with pytest.raises(InvalidOperation):
        dest.copy_rect(source, Rect(0, 0, 1, 1), 0, 0)
