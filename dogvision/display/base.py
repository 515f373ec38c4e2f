"""
Base class for display sinks.

To add a new display sink:
1. Create a new file in the display/ directory
2. Inherit from DisplaySink
3. Implement show(), and clear()/close() if the sink holds resources
4. Register in display/__init__.py SINKS dict
"""
from abc import ABC, abstractmethod
from typing import Optional

from dogvision.core.contracts import PixelBuffer
from dogvision.processing.codec import encode_image


class DisplaySink(ABC):
    """Abstract base class for display sinks.

    A sink receives transformed PixelBuffers for presentation. The core
    does not care how they are rendered.
    """

    @abstractmethod
    def show(self, buffer: PixelBuffer) -> None:
        """Present a transformed frame.

        Args:
            buffer: RGBA frame, owned by the sink from now on
        """
        pass

    def clear(self) -> None:
        """Blank the output when a session stops."""
        pass

    def close(self) -> None:
        """Release display resources."""
        pass


class LatestFrameSink(DisplaySink):
    """Keeps only the most recent frame, optionally encoded.

    Used for headless runs and for embedding the live path in another
    presentation layer that pulls frames instead of being pushed to.
    """

    def __init__(self, image_format: Optional[str] = None):
        """
        Args:
            image_format: If set, every frame is also encoded to this format
        """
        self.image_format = image_format
        self.latest: Optional[PixelBuffer] = None
        self.latest_encoded: Optional[bytes] = None
        self.frames_shown = 0

    def show(self, buffer: PixelBuffer) -> None:
        self.latest = buffer
        if self.image_format:
            self.latest_encoded = encode_image(buffer, self.image_format)
        self.frames_shown += 1

    def clear(self) -> None:
        self.latest = None
        self.latest_encoded = None
