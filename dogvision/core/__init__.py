"""
Core contracts for DogVision.

Everything the transform, the static processor and the frame session
exchange is defined here, together with the error taxonomy.
"""

from .contracts import (
    ColorModel,
    PixelBuffer,
    ProcessingResult,
    SessionState,
    SessionStats,
    StopReason,
    TickOutcome,
)
from .errors import (
    DogVisionError,
    InvalidBufferShape,
    DecodeError,
    EncodeError,
    SourceUnavailable,
    SourceSwitchFailed,
    SessionStateError,
)
