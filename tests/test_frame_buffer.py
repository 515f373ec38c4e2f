import numpy as np
import pytest

from dogvision.capture.frame_buffer import WorkingBuffer
from dogvision.core.errors import InvalidBufferShape

from conftest import solid_frame


def test_buffer_is_reused_for_same_size():
    working = WorkingBuffer()
    first = working.load(solid_frame((1, 2, 3)))
    second = working.load(solid_frame((4, 5, 6)))
    assert first is second
    assert working.reallocations == 1
    assert list(second.as_array()[0, 0]) == [4, 5, 6, 255]


def test_buffer_reallocates_on_resize():
    working = WorkingBuffer()
    working.load(solid_frame((1, 1, 1), width=4, height=3))
    resized = working.load(solid_frame((1, 1, 1), width=8, height=2))
    assert (resized.width, resized.height) == (8, 2)
    assert resized.shape_is_valid()
    assert working.reallocations == 2


def test_rgba_frames_keep_alpha():
    frame = np.full((2, 2, 4), 30, dtype=np.uint8)
    assert np.all(WorkingBuffer().load(frame).data == 30)


def test_frame_is_copied():
    frame = solid_frame((9, 9, 9))
    buffer = WorkingBuffer().load(frame)
    frame[:] = 0
    assert buffer.data[0] == 9


@pytest.mark.parametrize("frame", [
    np.zeros((4, 4), dtype=np.uint8),
    np.zeros((4, 4, 2), dtype=np.uint8),
    np.zeros((0, 4, 3), dtype=np.uint8),
])
def test_malformed_frames_rejected(frame):
    with pytest.raises(InvalidBufferShape):
        WorkingBuffer().load(frame)


def test_clear():
    working = WorkingBuffer()
    working.load(solid_frame((1, 2, 3)))
    working.clear()
    assert not working.is_allocated
    assert working.buffer is None
