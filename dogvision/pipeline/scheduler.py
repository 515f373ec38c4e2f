"""
Tick schedulers.

A scheduler is the "call me on the next frame" capability a FrameSession
uses instead of a platform timer. Callbacks requested during a step run
on the following step, like a display-refresh callback, so a session
that reschedules itself never runs twice in one step.
"""

from __future__ import annotations

import itertools
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Callable, Optional

from loguru import logger

TickCallback = Callable[[], object]


class TickScheduler(ABC):
    """Abstract per-frame callback scheduler."""

    @abstractmethod
    def request_tick(self, callback: TickCallback) -> int:
        """Run callback once on the next tick. Returns a cancel handle."""
        pass

    @abstractmethod
    def cancel_tick(self, handle: int) -> None:
        """Cancel a pending callback. Unknown handles are ignored."""
        pass

    @property
    @abstractmethod
    def pending(self) -> int:
        """Number of callbacks waiting for a tick."""
        pass


class ManualTickScheduler(TickScheduler):
    """
    Scheduler stepped explicitly by its owner.

    Embedders with their own loop call advance() once per displayed
    frame; nothing runs in between.
    """

    def __init__(self):
        self._callbacks: "OrderedDict[int, TickCallback]" = OrderedDict()
        self._handles = itertools.count(1)
        self.ticks = 0

    def request_tick(self, callback: TickCallback) -> int:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        return handle

    def cancel_tick(self, handle: int) -> None:
        self._callbacks.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def advance(self, steps: int = 1) -> int:
        """
        Fire pending callbacks.

        Args:
            steps: Number of ticks to run

        Returns:
            Number of callbacks invoked
        """
        fired = 0
        for _ in range(steps):
            due, self._callbacks = self._callbacks, OrderedDict()
            self.ticks += 1
            for callback in due.values():
                callback()
                fired += 1
        return fired


class PacedTickScheduler(ManualTickScheduler):
    """
    Display-refresh style loop at a target rate.

    run() steps until nothing is pending (every session stopped) or the
    idle hook asks to quit. Each step runs to completion before the next
    one starts.
    """

    def __init__(self, fps: float = 30.0):
        super().__init__()
        self.fps = fps
        self.interval = 1.0 / fps if fps > 0 else 0.0

    def run(
        self,
        idle_hook: Optional[Callable[[], bool]] = None,
        max_ticks: Optional[int] = None,
    ) -> int:
        """
        Drive ticks until idle.

        Args:
            idle_hook: Called after every step; return True to stop the loop
            max_ticks: Upper bound on steps (None = unbounded)

        Returns:
            Number of steps run
        """
        steps = 0
        logger.debug(f"Tick loop started @ {self.fps:.0f}fps")

        while self.pending and (max_ticks is None or steps < max_ticks):
            started = time.perf_counter()
            self.advance()
            steps += 1

            if idle_hook is not None and idle_hook():
                logger.debug("Tick loop stopped by idle hook")
                break

            remaining = self.interval - (time.perf_counter() - started)
            if remaining > 0:
                time.sleep(remaining)

        logger.debug(f"Tick loop finished after {steps} ticks")
        return steps
