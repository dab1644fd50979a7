"""Rest countdown and session clock driven by one-second ticks."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class ScheduledTask(Protocol):
    """Handle returned by a scheduler; cancelling it prevents the callback."""

    def cancel(self) -> None:
        ...


class Scheduler(ABC):
    """Schedules one-shot callbacks on the session's event loop."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once after ``delay`` seconds."""
        ...


class AsyncioScheduler(Scheduler):
    """Scheduler backed by ``loop.call_later`` on the running loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class RestTimer:
    """
    Single-shot rest countdown.

    Only one countdown runs at a time: starting a new one cancels the old
    one without signalling it. Completion is signalled exactly once, either
    when the countdown reaches zero or when it is skipped.
    """

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._handle: Optional[ScheduledTask] = None
        self._on_complete: Optional[Callable[[], None]] = None
        self._duration = 0
        self._remaining = 0

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def duration_seconds(self) -> int:
        return self._duration

    @property
    def is_running(self) -> bool:
        return self._on_complete is not None

    def start(self, duration_seconds: int, on_complete: Callable[[], None]) -> None:
        if self.is_running:
            logger.debug("Rest timer restarted while running; cancelling previous countdown")
            self.cancel()

        self._duration = max(0, int(duration_seconds))
        self._remaining = self._duration
        self._on_complete = on_complete
        if self._remaining == 0:
            self._finish()
            return
        self._handle = self._scheduler.call_later(TICK_SECONDS, self._tick)

    def skip(self) -> bool:
        """End the countdown now and signal completion. False if idle."""
        if not self.is_running:
            return False
        self._cancel_handle()
        self._remaining = 0
        self._finish()
        return True

    def cancel(self) -> None:
        """Stop the countdown without signalling completion."""
        self._cancel_handle()
        self._on_complete = None
        self._remaining = 0

    def _tick(self) -> None:
        self._handle = None
        if not self.is_running:
            return
        self._remaining -= 1
        if self._remaining <= 0:
            self._remaining = 0
            self._finish()
        else:
            self._handle = self._scheduler.call_later(TICK_SECONDS, self._tick)

    def _finish(self) -> None:
        callback, self._on_complete = self._on_complete, None
        if callback is not None:
            callback()

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class ElapsedClock:
    """Counts whole seconds since the session started; never pauses."""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._handle: Optional[ScheduledTask] = None
        self._seconds = 0
        self._started = False

    @property
    def elapsed_seconds(self) -> int:
        return self._seconds

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._started:
            return
        self._handle = self._scheduler.call_later(TICK_SECONDS, self._tick)
        self._started = True

    def stop(self) -> None:
        """Stop ticking; the count is kept."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._seconds += 1
        self._handle = self._scheduler.call_later(TICK_SECONDS, self._tick)
