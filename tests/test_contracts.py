import numpy as np
import pytest

from dogvision.core.contracts import ColorModel, PixelBuffer, SessionState
from dogvision.core.errors import InvalidBufferShape


def test_from_array_rgb_gets_opaque_alpha():
    frame = np.zeros((2, 3, 3), dtype=np.uint8)
    frame[..., 0] = 10
    buffer = PixelBuffer.from_array(frame)
    assert (buffer.width, buffer.height) == (3, 2)
    assert len(buffer) == 24
    assert np.all(buffer.as_array()[..., 3] == 255)
    assert np.all(buffer.as_array()[..., 0] == 10)


def test_from_array_keeps_alpha():
    frame = np.full((1, 2, 4), 7, dtype=np.uint8)
    assert list(PixelBuffer.from_array(frame).data) == [7] * 8


def test_from_array_grayscale():
    buffer = PixelBuffer.from_array(np.full((2, 2), 99, dtype=np.uint8))
    assert list(buffer.as_array()[0, 0]) == [99, 99, 99, 255]


def test_from_array_rejects_other_layouts():
    with pytest.raises(InvalidBufferShape):
        PixelBuffer.from_array(np.zeros((2, 2, 2), dtype=np.uint8))
    with pytest.raises(TypeError):
        PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.float32))


def test_from_bytes_owns_memory():
    raw = bytearray([1, 2, 3, 4])
    buffer = PixelBuffer.from_bytes(1, 1, raw)
    raw[0] = 200
    assert buffer.data[0] == 1
    buffer.data[1] = 50  # writable


def test_validate():
    assert PixelBuffer.blank(2, 2).shape_is_valid()
    bad = PixelBuffer(2, 2, np.zeros(3, dtype=np.uint8))
    assert not bad.shape_is_valid()
    with pytest.raises(InvalidBufferShape):
        bad.as_array()


def test_equality_and_copy():
    a = PixelBuffer.from_bytes(1, 1, b"\x01\x02\x03\x04")
    b = a.copy()
    assert a == b
    b.data[0] = 9
    assert a != b
    assert a != PixelBuffer.from_bytes(2, 1, b"\x01\x02\x03\x04" * 2)


def test_color_model_from_name():
    assert ColorModel.from_name("Canine") is ColorModel.CANINE
    assert ColorModel.from_name(" dichromatic ") is ColorModel.DICHROMATIC
    with pytest.raises(ValueError, match="Available"):
        ColorModel.from_name("protanopia")


def test_live_states():
    assert {s for s in SessionState if s.is_live} == {
        SessionState.INITIALIZING, SessionState.ACTIVE, SessionState.SWITCHING
    }
