"""
Base class for live frame sources.

To add a new frame source:
1. Create a new file in the capture/ directory
2. Inherit from BaseFrameSource
3. Implement all abstract methods
4. Register in capture/__init__.py SOURCES dict

Example implementation:
    class StillSource(BaseFrameSource):
        def __init__(self, frame):
            self.frame = frame

        def start(self) -> bool:
            return True

        def release(self) -> None:
            self.frame = None

        def get_frame(self) -> Optional[np.ndarray]:
            return self.frame

        @property
        def resolution(self) -> tuple:
            return (self.frame.shape[1], self.frame.shape[0])
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple
import numpy as np


class BaseFrameSource(ABC):
    """Abstract base class for live frame sources.

    A source is an opaque handle offering two things to a FrameSession:
    "give me the current frame, or nothing if not ready" and "release me".
    Device selection and permissions are handled before a source is built.

    Attributes:
        resolution: Tuple of (width, height) of the frames
        has_ended: Whether the source will never produce another frame
    """

    @abstractmethod
    def start(self) -> bool:
        """Acquire the underlying device or stream.

        Returns:
            True if acquired successfully, False otherwise
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Release the device and all resources. Safe to call twice."""
        pass

    @abstractmethod
    def get_frame(self) -> Optional[np.ndarray]:
        """Get the current frame without blocking.

        Returns:
            RGB (H, W, 3) or RGBA (H, W, 4) uint8 array, or None if no
            new frame is ready
        """
        pass

    @property
    @abstractmethod
    def resolution(self) -> Tuple[int, int]:
        """Get the reported frame size.

        Returns:
            Tuple of (width, height)
        """
        pass

    @property
    def has_ended(self) -> bool:
        """True once the source is permanently unavailable."""
        return False

    def get_device_info(self) -> dict:
        """Get information about the underlying device.

        Returns:
            Dict with device info (name, resolution, etc.)
        """
        return {"device": "unknown"}
