"""
Live pipeline.

Responsibilities:
- Per-frame tick scheduling
- Session lifecycle (acquire, tick, switch, stop)
"""

from .scheduler import TickScheduler, ManualTickScheduler, PacedTickScheduler
from .frame_session import FrameSession
