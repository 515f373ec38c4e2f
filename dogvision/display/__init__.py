"""
Display sink module.

Provides the sinks transformed frames are handed to.
"""
from .base import DisplaySink, LatestFrameSink
from .opencv_window import OpenCVWindowSink

# Registry of available sinks
SINKS = {
    "opencv": OpenCVWindowSink,
    "headless": LatestFrameSink,
}


def get_sink(name: str, config=None) -> DisplaySink:
    """Get a sink instance by name.

    Raises:
        ValueError: If sink name is not registered
    """
    if name not in SINKS:
        available = ", ".join(SINKS.keys())
        raise ValueError(f"Unknown sink '{name}'. Available: {available}")

    if name == "opencv":
        return OpenCVWindowSink(config)
    return LatestFrameSink(image_format=getattr(config, "image_format", None))


__all__ = ['DisplaySink', 'LatestFrameSink', 'OpenCVWindowSink', 'SINKS', 'get_sink']
