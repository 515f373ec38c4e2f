"""
Frame Session.

Drives the live path as an explicit state machine:

    IDLE -> INITIALIZING -> ACTIVE <-> SWITCHING -> STOPPED

Every tick (requested from a TickScheduler) polls the source once. No
frame means a silent no-op; a frame is copied into the reusable working
buffer, transformed, and handed to the display sink. Exactly one
transform runs per tick and ticks never overlap.

Cancellation is cooperative: stop() sets a flag checked at the top of
each tick. When stop() is called from inside a tick, teardown happens
once that tick's transform has finished.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from loguru import logger

from dogvision.capture.base import BaseFrameSource
from dogvision.capture.frame_buffer import WorkingBuffer
from dogvision.core.contracts import (
    ColorModel,
    PixelBuffer,
    SessionState,
    SessionStats,
    StopReason,
    TickOutcome,
)
from dogvision.core.errors import (
    DogVisionError,
    InvalidBufferShape,
    SessionStateError,
    SourceSwitchFailed,
    SourceUnavailable,
)
from dogvision.display.base import DisplaySink
from dogvision.pipeline.scheduler import TickScheduler
from dogvision.transforms.color_transform import transform

# Builds and starts a source for a device, or returns None
SourceProvider = Callable[[object], Optional[BaseFrameSource]]
StateListener = Callable[[SessionState, SessionState], None]


class FrameSession:
    """
    Live color-transform loop over one frame source at a time.

    Guarantees:
    - The session exclusively owns its source and working buffer
    - Both are released on every path into STOPPED, exactly once
    - stop() is idempotent
    - Frames that are not ready never raise or end the session
- A frame that fails to load, transform or display is dropped
    """

    def __init__(
        self,
        source_provider: SourceProvider,
        sink: DisplaySink,
        scheduler: TickScheduler,
        model: ColorModel = ColorModel.CANINE,
        on_state_change: Optional[StateListener] = None,
    ):
        """
        Initialize a session in IDLE.

        Args:
            source_provider: Device-access collaborator; returns a started
                source for a device, or None if it cannot be opened
            sink: Where transformed frames go
            scheduler: Tick capability driving the loop
            model: Simulation model applied to every frame
            on_state_change: Optional callback(old_state, new_state)
        """
        self.model = model
        self._provider = source_provider
        self._sink = sink
        self._scheduler = scheduler
        self._on_state_change = on_state_change

        self._state = SessionState.IDLE
        self._source: Optional[BaseFrameSource] = None
        self._device: object = None
        self._working = WorkingBuffer()

        self._lock = threading.RLock()
        self._cancel_requested = False
        self._pending_tick: Optional[int] = None
        self._in_tick = False

        self._stats = SessionStats()
        self._stop_reason: Optional[StopReason] = None
        self._last_error: Optional[DogVisionError] = None

    # ============================================================
    # LIFECYCLE
    # ============================================================

    def start(self, device: object = None) -> None:
        """
        Acquire a source and begin ticking.

        Args:
            device: Passed to the source provider (camera index, path, ...)

        Raises:
            SessionStateError: If the session is not IDLE
            SourceUnavailable: If no source could be acquired; the session
                is STOPPED afterwards
        """
        with self._lock:
            if self._state is not SessionState.IDLE:
                raise SessionStateError(f"Cannot start a session in state {self._state.value}")
            self._device = device
            self._set_state(SessionState.INITIALIZING)

        try:
            source = self._provider(device)
        except Exception as e:
            error = SourceUnavailable(f"Source {device!r} could not be acquired: {e}")
            self._fail(StopReason.SOURCE_UNAVAILABLE, error)
            raise error from e

        if source is None:
            error = SourceUnavailable(f"Source {device!r} is unavailable")
            self._fail(StopReason.SOURCE_UNAVAILABLE, error)
            raise error

        self._attach(source, device)

    def switch_source(self, device: object) -> None:
        """
        Replace the running source without ending the session.

        The old source is released before the new one is acquired.

        Raises:
            SessionStateError: If the session is not running
            SourceSwitchFailed: If the new source could not be acquired;
                no source remains, so the session is STOPPED
        """
        with self._lock:
            if self._cancel_requested or self._state not in (
                SessionState.ACTIVE, SessionState.INITIALIZING
            ):
                raise SessionStateError(f"Cannot switch source in state {self._state.value}")
            if self._in_tick:
                raise SessionStateError("Cannot switch source from inside a tick")

            self._set_state(SessionState.SWITCHING)
            self._cancel_pending_tick()
            previous, self._source = self._source, None

        if previous is not None:
            self._release(previous)

        try:
            source = self._provider(device)
        except Exception as e:
            error = SourceSwitchFailed(f"Switch to {device!r} failed: {e}")
            self._fail(StopReason.SWITCH_FAILED, error)
            raise error from e

        if source is None:
            error = SourceSwitchFailed(f"Switch to {device!r} failed: source unavailable")
            self._fail(StopReason.SWITCH_FAILED, error)
            raise error

        self._stats.source_switches += 1
        self._attach(source, device)

    def stop(self) -> bool:
        """
        Cancel the session.

        Returns:
            True if this call stopped the session, False if it was
            already stopped (or stopping)
        """
        with self._lock:
            if self._state is SessionState.IDLE:
                self._stop_reason = StopReason.CANCELLED
                self._cancel_requested = True
                self._set_state(SessionState.STOPPED)
                return True

            stopping = self._request_stop(StopReason.CANCELLED)
            if self._in_tick:
                if stopping:
                    logger.debug("Stop requested during tick, teardown deferred")
                return stopping

            # Also covers a stop that was requested but never torn down
            pending = self._cancel_requested and self._state.is_live

        if not pending:
            return False
        self._teardown()
        return True

    # ============================================================
    # TICK
    # ============================================================

    def tick(self) -> TickOutcome:
        """
        Handle one scheduling tick.

        A stop requested while the tick runs is carried out before this
        returns, whether the tick finishes normally or raises.

        Returns:
            What the tick did

        Raises:
            SessionStateError: If called while another tick is running
            SourceUnavailable: If reading the source failed; the session
                is STOPPED
        """
        with self._lock:
            if self._in_tick:
                raise SessionStateError("Tick already in progress")
            if self._cancel_requested or not self._state.is_live or self._source is None:
                return TickOutcome.CANCELLED
            self._in_tick = True
            source = self._source

        try:
            outcome = self._process_frame(source)
        finally:
            with self._lock:
                self._in_tick = False
                teardown = self._cancel_requested and self._state.is_live
            if teardown:
                self._teardown()

        self._schedule()
        return outcome

    def _process_frame(self, source: BaseFrameSource) -> TickOutcome:
        try:
            frame = self._read(source)
        except Exception as e:
            error = SourceUnavailable(f"Reading {source.get_device_info()} failed: {e}")
            logger.error(str(error))
            with self._lock:
                self._last_error = error
            self._request_stop(StopReason.SOURCE_UNAVAILABLE)
            raise error from e

        if frame is None:
            if source.has_ended:
                self._request_stop(StopReason.SOURCE_ENDED)
                return TickOutcome.SOURCE_ENDED
            self._stats.ticks_not_ready += 1
            return TickOutcome.NOT_READY

        try:
            working = self._working.load(frame)
            result = transform(working, self.model)
            self._stats.buffer_reallocations = self._working.reallocations
            self._sink.show(result)
        except InvalidBufferShape as e:
            self._drop(str(e))
            logger.warning(f"Dropped malformed frame: {e}")
            return TickOutcome.DROPPED
        except Exception as e:
            self._drop(f"{type(e).__name__}: {e}")
            logger.exception(f"Dropped frame after processing error: {e}")
            return TickOutcome.DROPPED

        self._stats.frames_rendered += 1

        with self._lock:
            if not self._cancel_requested and self._state in (
                SessionState.INITIALIZING, SessionState.SWITCHING
            ):
                self._set_state(SessionState.ACTIVE)
        return TickOutcome.RENDERED

    def _read(self, source: BaseFrameSource):
        """Next frame from the source, or None when not ready or ended."""
        if source.has_ended:
            return None
        return source.get_frame()

    def _drop(self, reason: str):
        self._stats.frames_dropped += 1
        self._stats.last_drop_reason = reason

    def _on_scheduled_tick(self):
        with self._lock:
            self._pending_tick = None
        self.tick()

    # ============================================================
    # INTERNALS
    # ============================================================

    def _attach(self, source: BaseFrameSource, device: object):
        with self._lock:
            if self._cancel_requested:
                # Stopped while the source was being acquired
                stale = source
            else:
                stale = None
                self._source = source
                self._device = device
                logger.info(f"Session source attached: {source.get_device_info()}")
                self._schedule()

        if stale is not None:
            self._release(stale)

    def _schedule(self):
        with self._lock:
            if self._cancel_requested or not self._state.is_live or self._pending_tick is not None:
                return
            self._pending_tick = self._scheduler.request_tick(self._on_scheduled_tick)

    def _cancel_pending_tick(self):
        if self._pending_tick is not None:
            self._scheduler.cancel_tick(self._pending_tick)
            self._pending_tick = None

    def _request_stop(self, reason: StopReason) -> bool:
        with self._lock:
            if self._cancel_requested or not self._state.is_live:
                return False
            self._cancel_requested = True
            self._stop_reason = reason
            self._cancel_pending_tick()
            return True

    def _fail(self, reason: StopReason, error: DogVisionError):
        logger.error(str(error))
        with self._lock:
            self._last_error = error
            self._cancel_requested = True
            self._stop_reason = reason
        self._teardown()

    def _teardown(self):
        with self._lock:
            if self._state is SessionState.STOPPED:
                return
            self._cancel_pending_tick()
            source, self._source = self._source, None
            self._set_state(SessionState.STOPPED)

        try:
            if source is not None:
                self._release(source)
        finally:
            self._working.clear()
            self._sink.clear()

        reason = self._stop_reason.value if self._stop_reason else "unknown"
        logger.info(
            f"Session stopped ({reason}): {self._stats.frames_rendered} frames rendered, "
            f"{self._stats.frames_dropped} dropped"
        )

    def _release(self, source: BaseFrameSource):
        source.release()
        logger.debug(f"Session source released: {source.get_device_info()}")

    def _set_state(self, new_state: SessionState):
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        self._stats.history.append(new_state)
        logger.debug(f"Session state: {old_state.value} -> {new_state.value}")
        if self._on_state_change is not None:
            self._on_state_change(old_state, new_state)

    # ============================================================
    # CONTEXT MANAGER / PROPERTIES
    # ============================================================

    def __enter__(self) -> FrameSession:
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.is_live and not self._cancel_requested

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def stop_reason(self) -> Optional[StopReason]:
        return self._stop_reason

    @property
    def last_error(self) -> Optional[DogVisionError]:
        return self._last_error

    @property
    def device(self) -> object:
        return self._device

    @property
    def working_buffer(self) -> Optional[PixelBuffer]:
        return self._working.buffer
