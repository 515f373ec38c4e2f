"""Shared fixtures: scripted frame sources and recording sinks."""

from typing import List, Optional

import numpy as np
import pytest

from dogvision.capture.base import BaseFrameSource
from dogvision.core.contracts import PixelBuffer
from dogvision.display.base import DisplaySink
from dogvision.pipeline.scheduler import ManualTickScheduler


class ScriptedSource(BaseFrameSource):
    """Returns queued frames in order; None entries mean "not ready"."""

    def __init__(self, frames=None, name="scripted", end_when_empty=False):
        self.frames: List[Optional[np.ndarray]] = list(frames or [])
        self.name = name
        self.end_when_empty = end_when_empty
        self.started = False
        self.release_count = 0
        self.reads = 0
        self.ended = False

    def start(self) -> bool:
        self.started = True
        return True

    def release(self) -> None:
        self.release_count += 1

    def get_frame(self):
        self.reads += 1
        if not self.frames:
            if self.end_when_empty:
                self.ended = True
            return None
        return self.frames.pop(0)

    @property
    def resolution(self):
        return (0, 0)

    @property
    def has_ended(self) -> bool:
        return self.ended

    def get_device_info(self) -> dict:
        return {"device": self.name}


class RecordingSink(DisplaySink):
    def __init__(self):
        self.shown: List[PixelBuffer] = []
        self.clear_count = 0

    def show(self, buffer: PixelBuffer) -> None:
        self.shown.append(buffer)

    def clear(self) -> None:
        self.clear_count += 1


def solid_frame(rgb, width=4, height=3) -> np.ndarray:
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:, :] = rgb
    return frame


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_buffer(rng):
    width, height = 17, 9
    data = rng.integers(0, 256, size=width * height * 4, dtype=np.uint8)
    return PixelBuffer(width, height, data)
