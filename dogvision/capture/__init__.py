"""
Frame capture module.

Provides live frame sources (webcam, video file) and the working
buffer frames are copied into.

To add a new source:
1. Create a new file in this directory (e.g., screen.py)
2. Implement a class inheriting from BaseFrameSource
3. Register it in SOURCES dict below
"""
from typing import Callable, Optional, Union

from .base import BaseFrameSource
from .frame_buffer import WorkingBuffer
from .video_file import VideoFileSource
from .webcam import WebcamSource

# Registry of available sources
SOURCES = {
    "webcam": WebcamSource,
    "file": VideoFileSource,
}

Device = Union[int, str, None]


def get_source(name: str, config=None) -> BaseFrameSource:
    """Get a source instance by name.

    Args:
        name: Source type name (e.g., "webcam", "file")
        config: VideoConfig-like object

    Returns:
        Unstarted source instance

    Raises:
        ValueError: If source name is not registered
    """
    if name not in SOURCES:
        available = ", ".join(SOURCES.keys())
        raise ValueError(f"Unknown source '{name}'. Available: {available}")

    return SOURCES[name](config)


def source_for_device(device: Device, config=None) -> BaseFrameSource:
    """Build an unstarted source for a camera index or video file path.

    Args:
        device: Camera index (int or digit string), file path, or None for
            the configured default
        config: VideoConfig-like object

    Returns:
        WebcamSource or VideoFileSource
    """
    if device is None:
        if getattr(config, 'video_file', None):
            return VideoFileSource(config)
        return WebcamSource(config)

    if isinstance(device, int) or (isinstance(device, str) and device.isdigit()):
        return WebcamSource(config, device_index=int(device))

    return VideoFileSource(config, video_path=str(device))


def make_source_provider(config=None) -> Callable[[Device], Optional[BaseFrameSource]]:
    """Device-access provider for FrameSession.

    The returned callable builds and starts a source for a device, or
    returns None if the device could not be opened.
    """
    def provide(device: Device) -> Optional[BaseFrameSource]:
        source = source_for_device(device, config)
        if not source.start():
            source.release()
            return None
        return source

    return provide


def list_sources() -> list:
    """List available source names."""
    return list(SOURCES.keys())


__all__ = [
    'BaseFrameSource', 'WebcamSource', 'VideoFileSource', 'WorkingBuffer',
    'get_source', 'source_for_device', 'make_source_provider', 'list_sources',
]
