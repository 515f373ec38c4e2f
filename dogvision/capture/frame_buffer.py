"""
Reusable working buffer for the live path.

A FrameSession copies every incoming frame into one preallocated RGBA
buffer instead of allocating per frame. The buffer is reallocated only
when the source's frame dimensions change.
"""

from __future__ import annotations

import threading
from typing import Optional
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from dogvision.core.contracts import CHANNELS, PixelBuffer
from dogvision.core.errors import InvalidBufferShape


class WorkingBuffer:
    """
    Single RGBA frame buffer reused across ticks.

    Accepts (H, W, 3) RGB or (H, W, 4) RGBA uint8 frames. RGB frames are
    written with an opaque alpha channel.
    """

    def __init__(self):
        self._buffer: Optional[PixelBuffer] = None
        self._lock = threading.Lock()
        self._reallocations = 0

    def load(self, frame: NDArray[np.uint8]) -> PixelBuffer:
        """
        Copy a frame into the working buffer.

        Args:
            frame: Source frame

        Returns:
            The working PixelBuffer (same object across calls of equal size)

        Raises:
            InvalidBufferShape: If the frame is not an RGB/RGBA image
        """
        if frame.ndim != 3 or frame.shape[2] not in (3, CHANNELS) or frame.size == 0:
            height = frame.shape[0] if frame.ndim > 0 else 0
            width = frame.shape[1] if frame.ndim > 1 else 0
            raise InvalidBufferShape(width, height, frame.size)

        height, width = frame.shape[:2]

        with self._lock:
            if (
                self._buffer is None
                or self._buffer.width != width
                or self._buffer.height != height
            ):
                self._allocate(width, height)

            view = self._buffer.data.reshape(height, width, CHANNELS)
            view[:, :, :3] = frame[:, :, :3]
            if frame.shape[2] == CHANNELS:
                view[:, :, 3] = frame[:, :, 3]
            else:
                view[:, :, 3] = 255
            return self._buffer

    def _allocate(self, width: int, height: int):
        previous = None if self._buffer is None else (self._buffer.width, self._buffer.height)
        self._buffer = PixelBuffer.blank(width, height)
        self._reallocations += 1
        if previous is None:
            logger.debug(f"Working buffer allocated: {width}x{height}")
        else:
            logger.info(
                f"Frame size changed {previous[0]}x{previous[1]} -> {width}x{height}, "
                f"working buffer reallocated"
            )

    def clear(self):
        """Drop the buffer memory."""
        with self._lock:
            self._buffer = None
        logger.debug("Working buffer cleared")

    @property
    def buffer(self) -> Optional[PixelBuffer]:
        return self._buffer

    @property
    def is_allocated(self) -> bool:
        return self._buffer is not None

    @property
    def reallocations(self) -> int:
        return self._reallocations
