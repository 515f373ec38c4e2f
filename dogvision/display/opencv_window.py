"""
OpenCV window display sink.

Simple sink using OpenCV's imshow for display and waitKey for input.
"""
from typing import Optional
import cv2
import numpy as np
from loguru import logger

from dogvision.core.contracts import PixelBuffer
from .base import DisplaySink

QUIT_KEYS = (ord('q'), 27)  # q, ESC


class OpenCVWindowSink(DisplaySink):
    """OpenCV-based sink.

    Frames wider than max_width are downscaled for display. The window is
    created lazily on the first frame.
    """

    def __init__(self, config=None, window_name: Optional[str] = None):
        """Initialize OpenCV sink.

        Args:
            config: DisplayConfig-like object (max_width, window_name)
            window_name: Window title, overrides config.window_name
        """
        self.config = config
        self.window_name = window_name or getattr(config, 'window_name', "DogVision")
        self.max_width = getattr(config, 'max_width', 1920) if config else 1920
        self._window_open = False
        self._last_size = (0, 0)

    def show(self, buffer: PixelBuffer) -> None:
        """Display an RGBA frame."""
        display_frame = cv2.cvtColor(buffer.as_array(), cv2.COLOR_RGBA2BGR)

        # Downscale if too wide (use INTER_AREA for quality)
        h, w = display_frame.shape[:2]
        if w > self.max_width:
            scale = self.max_width / w
            display_frame = cv2.resize(
                display_frame, None,
                fx=scale, fy=scale,
                interpolation=cv2.INTER_AREA
            )

        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
            self._window_open = True
        self._last_size = display_frame.shape[1], display_frame.shape[0]
        cv2.imshow(self.window_name, display_frame)

    def show_side_by_side(self, left: PixelBuffer, right: PixelBuffer) -> None:
        """Display two equally sized frames next to each other (before/after)."""
        if left.height != right.height:
            raise ValueError("Side-by-side frames must have the same height")
        combined = np.hstack([left.as_array(), right.as_array()])
        self.show(PixelBuffer.from_array(combined))

    def poll_input(self, delay_ms: int = 1) -> Optional[int]:
        """Poll for keyboard input.

        Returns:
            Key code (0-255) or None if no key pressed
        """
        key = cv2.waitKey(delay_ms) & 0xFF
        if key == 255:  # No key pressed
            return None
        return key

    def clear(self) -> None:
        """Blank the window at its last size."""
        if self._window_open and self._last_size != (0, 0):
            w, h = self._last_size
            cv2.imshow(self.window_name, np.zeros((h, w, 3), dtype=np.uint8))

    def close(self) -> None:
        """Destroy the window."""
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
            logger.debug(f"Window '{self.window_name}' closed")
