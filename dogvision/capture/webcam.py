"""
Webcam frame source.

Wraps an OpenCV VideoCapture device and hands out RGB frames.
"""
from typing import Optional, Tuple
import os
import cv2
import numpy as np
from loguru import logger

from .base import BaseFrameSource


class WebcamSource(BaseFrameSource):
    """Camera frame source using OpenCV.

    A failed read is reported as "not ready". After max_read_failures
    consecutive failed reads the camera is considered gone and the
    source reports has_ended.
    """

    def __init__(self, config=None, device_index: Optional[int] = None):
        """Initialize webcam source.

        Args:
            config: VideoConfig-like object (width, height, fps,
                max_read_failures, device_index)
            device_index: Camera index, overrides config.device_index
        """
        self.config = config
        if device_index is None:
            device_index = getattr(config, 'device_index', 0) if config else 0
        self.device_index = device_index
        self.width = getattr(config, 'width', 1280) if config else 1280
        self.height = getattr(config, 'height', 720) if config else 720
        self.fps = getattr(config, 'fps', 30) if config else 30
        self.max_read_failures = getattr(config, 'max_read_failures', 30) if config else 30

        self.cap: Optional[cv2.VideoCapture] = None
        self._resolution = (0, 0)
        self._consecutive_failures = 0
        self._ended = False

    def start(self) -> bool:
        """Open the camera."""
        logger.info(f"Opening webcam {self.device_index}...")
        backend = getattr(self.config, 'camera_backend', None)
        if backend is None and os.name == 'nt':
            backend = cv2.CAP_DSHOW

        try:
            if backend is not None:
                self.cap = cv2.VideoCapture(self.device_index, backend)
            else:
                self.cap = cv2.VideoCapture(self.device_index)
        except cv2.error as e:
            logger.error(f"Failed to open webcam {self.device_index}: {e}")
            self.cap = None
            return False

        if not self.cap.isOpened():
            logger.error(f"Could not open webcam {self.device_index}")
            self.release()
            return False

        # Keep the capture buffer small to reduce lag
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)

        w = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = self.cap.get(cv2.CAP_PROP_FPS)
        self._resolution = (w, h)
        self._consecutive_failures = 0
        self._ended = False

        logger.info(f"Webcam opened: {w}x{h} @ {actual_fps:.0f}fps")
        return True

    def release(self) -> None:
        """Release the camera."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Webcam {self.device_index} released")

    def get_frame(self) -> Optional[np.ndarray]:
        """Read the next camera frame as RGB."""
        if self.cap is None or self._ended:
            return None

        ret, frame = self.cap.read()
        if not ret or frame is None:
            self._consecutive_failures += 1
            if self._consecutive_failures >= self.max_read_failures:
                logger.warning(
                    f"Webcam {self.device_index} failed {self._consecutive_failures} reads in a row"
                )
                self._ended = True
            return None

        self._consecutive_failures = 0
        h, w = frame.shape[:2]
        self._resolution = (w, h)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    @property
    def resolution(self) -> Tuple[int, int]:
        return self._resolution

    @property
    def has_ended(self) -> bool:
        return self._ended

    def get_device_info(self) -> dict:
        return {
            "device": f"Webcam {self.device_index}",
            "resolution": f"{self._resolution[0]}x{self._resolution[1]}",
        }
