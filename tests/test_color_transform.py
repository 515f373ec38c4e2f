import numpy as np
import pytest

from dogvision.core.contracts import ColorModel, PixelBuffer
from dogvision.core.errors import InvalidBufferShape
from dogvision.transforms import scotopic_blend_factor, supported_models, transform


def pixel(rgba):
    return PixelBuffer.from_bytes(1, 1, bytes(rgba))


def out_pixel(buffer):
    return list(buffer.data)


ALL_MODELS = [ColorModel.DICHROMATIC, ColorModel.CANINE]


class TestDichromatic:
    def test_pure_red(self):
        result = transform(pixel([255, 0, 0, 255]), ColorModel.DICHROMATIC)
        assert out_pixel(result) == [92, 71, 0, 255]

    def test_gray_is_preserved(self):
        # Every matrix row sums to 1
        for level in (0, 64, 128, 200, 255):
            result = transform(pixel([level, level, level, 255]), ColorModel.DICHROMATIC)
            assert out_pixel(result) == [level, level, level, 255]

    def test_red_and_green_become_similar(self):
        red = out_pixel(transform(pixel([200, 40, 40, 255]), ColorModel.DICHROMATIC))
        green = out_pixel(transform(pixel([40, 200, 40, 255]), ColorModel.DICHROMATIC))
        # Both end up with red and green channels close together
        assert abs(red[0] - red[1]) < 30
        assert abs(green[0] - green[1]) < 30


class TestCanine:
    def test_black_gets_full_rod_blend(self):
        assert scotopic_blend_factor(0.0) == pytest.approx(0.39)
        result = transform(pixel([0, 0, 0, 255]), ColorModel.CANINE)
        # Black has no rod response to tint with
        assert out_pixel(result) == [0, 0, 0, 255]

    def test_white(self):
        result = transform(pixel([255, 255, 255, 255]), ColorModel.CANINE)
        assert out_pixel(result) == [243, 243, 243, 255]

    def test_dark_pixels_get_blue_green_tint(self):
        r, g, b, a = out_pixel(transform(pixel([40, 40, 40, 255]), ColorModel.CANINE))
        assert g > r
        assert b >= r
        assert a == 255

    def test_bright_pixels_get_no_rod_contribution(self):
        # Luminance of white is 1.0, far above the threshold
        r, g, b, _ = out_pixel(transform(pixel([255, 255, 255, 255]), ColorModel.CANINE))
        assert r == g == b

    def test_red_and_green_collapse_to_yellow(self):
        for rgb in ([255, 0, 0], [0, 255, 0]):
            r, g, b, _ = out_pixel(transform(pixel(rgb + [255]), ColorModel.CANINE))
            assert r >= g > b

    def test_blue_stays_blue(self):
        r, g, b, _ = out_pixel(transform(pixel([0, 0, 255, 255]), ColorModel.CANINE))
        assert b > g > r

    def test_not_idempotent(self):
        once = transform(pixel([255, 255, 255, 255]), ColorModel.CANINE)
        twice = transform(once, ColorModel.CANINE)
        assert once != twice


class TestScotopicBlend:
    def test_threshold(self):
        assert scotopic_blend_factor(0.3) == 0.0
        assert scotopic_blend_factor(0.8) == 0.0

    def test_linear_below_threshold(self):
        assert scotopic_blend_factor(0.2) == pytest.approx(0.13)

    def test_capped(self):
        assert scotopic_blend_factor(-1.0) == pytest.approx(0.4)

    def test_array_input(self):
        factors = scotopic_blend_factor(np.array([0.0, 0.1, 0.5]))
        np.testing.assert_allclose(factors, [0.39, 0.26, 0.0])


@pytest.mark.parametrize("model", ALL_MODELS)
class TestInvariants:
    def test_preserves_dimensions_and_alpha(self, model, random_buffer):
        result = transform(random_buffer, model)
        assert (result.width, result.height) == (random_buffer.width, random_buffer.height)
        assert len(result) == len(random_buffer)
        np.testing.assert_array_equal(result.data[3::4], random_buffer.data[3::4])

    @pytest.mark.parametrize("value", [0x00, 0xFF])
    def test_extreme_buffers_stay_in_range(self, model, value):
        buffer = PixelBuffer(5, 5, np.full(100, value, dtype=np.uint8))
        result = transform(buffer, model)
        assert result.data.dtype == np.uint8
        assert result.data.min() >= 0 and result.data.max() <= 255
        assert np.all(result.data[3::4] == value)

    def test_deterministic(self, model, random_buffer):
        assert transform(random_buffer, model).tobytes() == transform(random_buffer, model).tobytes()

    def test_input_not_mutated(self, model, random_buffer):
        before = random_buffer.tobytes()
        result = transform(random_buffer, model)
        assert random_buffer.tobytes() == before
        assert result.data is not random_buffer.data

    def test_pixels_are_independent(self, model, random_buffer):
        whole = transform(random_buffer, model).as_array()
        pixels = random_buffer.as_array()
        for y, x in [(0, 0), (4, 7), (8, 16)]:
            single = transform(PixelBuffer.from_array(pixels[y:y + 1, x:x + 1]), model)
            np.testing.assert_array_equal(single.data, whole[y, x])

    @pytest.mark.parametrize("width,height,length", [(2, 2, 15), (2, 2, 17), (1, 1, 3), (0, 1, 0), (3, -1, 12)])
    def test_shape_mismatch_raises(self, model, width, height, length):
        buffer = PixelBuffer(width, height, np.zeros(length, dtype=np.uint8))
        with pytest.raises(InvalidBufferShape):
            transform(buffer, model)


def test_unknown_model_rejected():
    with pytest.raises(ValueError):
        transform(pixel([1, 2, 3, 4]), "sepia")


def test_supported_models():
    assert set(supported_models()) == set(ColorModel)


def test_default_model_is_canine():
    buffer = pixel([10, 120, 220, 255])
    assert transform(buffer) == transform(buffer, ColorModel.CANINE)
