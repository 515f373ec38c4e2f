"""
Core data contracts for DogVision.

All components exchange data through these types:
- PixelBuffer: the canonical RGBA image representation
- ColorModel: the fixed simulation variants
- Session enums and result types for the live and static paths
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from dogvision.core.errors import DogVisionError, InvalidBufferShape


CHANNELS = 4  # R, G, B, A


# ============================================================
# ENUMERATIONS
# ============================================================

class ColorModel(Enum):
    """Named simulation variants. Constants live in transforms.color_models."""
    DICHROMATIC = "dichromatic"
    CANINE = "canine"

    @classmethod
    def from_name(cls, name: str) -> ColorModel:
        """Parse a model name case-insensitively ("canine", "DICHROMATIC")."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown color model '{name}'. Available: {available}") from None


class SessionState(Enum):
    """Lifecycle states of a FrameSession."""
    IDLE = "idle"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    SWITCHING = "switching"
    STOPPED = "stopped"

    @property
    def is_live(self) -> bool:
        """True while the session holds a source."""
        return self in (SessionState.INITIALIZING, SessionState.ACTIVE, SessionState.SWITCHING)


class TickOutcome(Enum):
    """What a single scheduling tick did."""
    RENDERED = "rendered"
    NOT_READY = "not_ready"
    DROPPED = "dropped"
    SOURCE_ENDED = "source_ended"
    CANCELLED = "cancelled"


class StopReason(Enum):
    """Why a session reached STOPPED."""
    CANCELLED = "cancelled"
    SOURCE_ENDED = "source_ended"
    SOURCE_UNAVAILABLE = "source_unavailable"
    SWITCH_FAILED = "switch_failed"


# ============================================================
# PIXEL BUFFER
# ============================================================

@dataclass(eq=False)
class PixelBuffer:
    """
    Interleaved 8-bit RGBA pixels, row-major, top-to-bottom.

    The constructor does not validate: a malformed buffer can exist so that
    consumers (the color transform) can reject it with InvalidBufferShape.
    """
    width: int
    height: int
    data: NDArray[np.uint8]  # flat, width * height * 4

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> PixelBuffer:
        """Wrap raw RGBA bytes (copied, so the buffer owns its memory)."""
        return cls(width, height, np.frombuffer(bytes(data), dtype=np.uint8).copy())

    @classmethod
    def from_array(cls, frame: NDArray[np.uint8]) -> PixelBuffer:
        """
        Build a buffer from an image array.

        Args:
            frame: uint8 array of shape (H, W), (H, W, 3) or (H, W, 4).
                Grayscale and RGB frames get an opaque alpha channel.

        Returns:
            New PixelBuffer owning a copy of the pixels
        """
        if frame.dtype != np.uint8:
            raise TypeError(f"Expected uint8 pixels, got {frame.dtype}")

        if frame.ndim == 2:
            frame = np.repeat(frame[:, :, np.newaxis], 3, axis=2)

        if frame.ndim != 3 or frame.shape[2] not in (3, CHANNELS):
            raise InvalidBufferShape(
                frame.shape[1] if frame.ndim > 1 else 0,
                frame.shape[0] if frame.ndim > 0 else 0,
                frame.size,
            )

        height, width = frame.shape[:2]
        rgba = np.empty((height, width, CHANNELS), dtype=np.uint8)
        rgba[:, :, :3] = frame[:, :, :3]
        rgba[:, :, 3] = frame[:, :, 3] if frame.shape[2] == CHANNELS else 255
        return cls(width, height, rgba.reshape(-1))

    @classmethod
    def blank(cls, width: int, height: int) -> PixelBuffer:
        """Transparent black buffer."""
        return cls(width, height, np.zeros(width * height * CHANNELS, dtype=np.uint8))

    @property
    def expected_length(self) -> int:
        return self.width * self.height * CHANNELS

    def shape_is_valid(self) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.data.ndim == 1
            and self.data.size == self.expected_length
        )

    def validate(self) -> None:
        """Raise InvalidBufferShape unless the bytes match the dimensions."""
        if not self.shape_is_valid():
            raise InvalidBufferShape(self.width, self.height, int(self.data.size))

    def as_array(self) -> NDArray[np.uint8]:
        """(H, W, 4) view over the same memory."""
        self.validate()
        return self.data.reshape(self.height, self.width, CHANNELS)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.data.copy())

    def __len__(self) -> int:
        return int(self.data.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )

    __hash__ = None


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass
class ProcessingResult:
    """Result of transforming one still image."""
    original: Optional[PixelBuffer] = None
    transformed: Optional[PixelBuffer] = None
    model: ColorModel = ColorModel.CANINE

    # If decoding fails
    success: bool = True
    error: Optional[DogVisionError] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    @property
    def dimensions(self) -> Optional[tuple]:
        """(width, height) of the processed image, for aspect-ratio layout."""
        if self.original is None:
            return None
        return (self.original.width, self.original.height)


@dataclass
class SessionStats:
    """Counters for a FrameSession."""
    frames_rendered: int = 0
    ticks_not_ready: int = 0
    frames_dropped: int = 0
    buffer_reallocations: int = 0
    source_switches: int = 0

    # Per-frame failure tracking
    last_drop_reason: Optional[str] = None
    history: list = field(default_factory=list)  # SessionState transitions
