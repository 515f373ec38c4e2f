"""
Error taxonomy for DogVision.

Lifecycle failures raise, per-frame hiccups never do:
- InvalidBufferShape: buffer length disagrees with its dimensions
- DecodeError: encoded image bytes could not be decoded
- EncodeError: no encoder for the requested output format
- SourceUnavailable / SourceSwitchFailed: live source acquisition failed
- SessionStateError: operation not allowed in the current session state

A frame that is simply not ready yet is NOT an error (see TickOutcome).
"""


class DogVisionError(Exception):
    """Base class for all DogVision errors."""


class InvalidBufferShape(DogVisionError, ValueError):
    """Pixel buffer byte length does not equal width * height * 4."""

    def __init__(self, width: int, height: int, length: int):
        self.width = width
        self.height = height
        self.length = length
        super().__init__(
            f"Buffer of {length} bytes does not match {width}x{height} RGBA "
            f"(expected {max(width, 0) * max(height, 0) * 4})"
        )


class DecodeError(DogVisionError):
    """Encoded image bytes are malformed or in an unsupported format."""


class SourceUnavailable(DogVisionError):
    """A live frame source could not be acquired."""


class SourceSwitchFailed(DogVisionError):
    """Switching a running session to another source failed."""


class SessionStateError(DogVisionError, RuntimeError):
    """Requested session operation is not valid in the current state."""


class EncodeError(DogVisionError, ValueError):
    """Pixels could not be encoded to the requested image format."""
