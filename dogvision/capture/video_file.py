"""
Video file frame source - reads frames from a video file.

Useful for running the live path on recorded footage. Frames are
released at the file's own framerate (scaled by playback_speed); a poll
that arrives before the next frame is due gets "not ready".
"""
import time
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from .base import BaseFrameSource


class VideoFileSource(BaseFrameSource):
    """Frame source that plays back a video file in real time."""

    def __init__(self, config=None, video_path: Optional[str] = None):
        """Initialize video file source.

        Args:
            config: VideoConfig-like object (video_file, playback_speed, loop)
            video_path: File to play, overrides config.video_file
        """
        self.config = config
        self.video_path = video_path or getattr(config, 'video_file', None)
        self.playback_speed = getattr(config, 'playback_speed', 1.0) if config else 1.0
        self.loop = getattr(config, 'loop', False) if config else False

        self.cap: Optional[cv2.VideoCapture] = None
        self.fps = 30.0
        self.frame_time = 1.0 / 30
        self.width = 0
        self.height = 0
        self.frame_idx = 0
        self._next_frame_at = 0.0
        self._ended = False

    def start(self) -> bool:
        """Open the video file."""
        if not self.video_path:
            logger.error("No video file specified")
            return False

        path = Path(self.video_path)
        if not path.exists():
            logger.error(f"Video file not found: {path}")
            return False

        self.cap = cv2.VideoCapture(str(path))
        if not self.cap.isOpened():
            logger.error(f"Could not open video: {path}")
            self.release()
            return False

        self.fps = self.cap.get(cv2.CAP_PROP_FPS) or 30.0
        self.frame_time = 1.0 / (self.fps * max(self.playback_speed, 1e-3))
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        frame_count = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))

        logger.info(
            f"Video file opened: {path.name} {self.width}x{self.height}, "
            f"{frame_count} frames @ {self.fps:.1f}fps (x{self.playback_speed})"
        )

        self.frame_idx = 0
        self._next_frame_at = time.perf_counter()
        self._ended = False
        return True

    def release(self) -> None:
        """Close the file."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Video file released after {self.frame_idx} frames")

    def get_frame(self) -> Optional[np.ndarray]:
        """Return the next frame once it is due, else None."""
        if self.cap is None or self._ended:
            return None

        now = time.perf_counter()
        if now < self._next_frame_at:
            return None

        ret, frame = self.cap.read()
        if not ret or frame is None:
            if self.loop and self.frame_idx > 0:
                self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                ret, frame = self.cap.read()
            if not ret or frame is None:
                logger.info("End of video file")
                self._ended = True
                return None

        self.frame_idx += 1
        # Don't accumulate drift when polled late
        self._next_frame_at = max(self._next_frame_at + self.frame_time, now)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def has_ended(self) -> bool:
        return self._ended

    def get_device_info(self) -> dict:
        return {
            "device": f"File {Path(self.video_path).name}" if self.video_path else "File",
            "resolution": f"{self.width}x{self.height}",
            "fps": self.fps,
        }
