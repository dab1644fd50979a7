"""Single-slot save queue that keeps the remote workout up to date."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from workout_runner.config import settings
from workout_runner.errors import TransportError
from workout_runner.models import Workout
from workout_runner.sync.gateway import PersistenceGateway
from workout_runner.sync.retry import backoff_delay, create_async_retrying, is_retryable_error


logger = logging.getLogger(__name__)


class ProgressWriter:
    """
    Serializes saves through one "latest pending write" slot.

    Only the newest snapshot is ever waiting to be sent. While a save is in
    flight, newer snapshots replace each other in the slot and the running
    drain sends the last one when the current request returns. A snapshot
    that failed to send stays in the slot until a later attempt succeeds:
    the next ``submit``, ``notify_online``, or a background retry with
    exponential backoff.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        max_attempts: Optional[int] = None,
        min_wait_seconds: Optional[float] = None,
        max_wait_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_failure: Optional[Callable[[TransportError], None]] = None,
    ):
        self.gateway = gateway
        self.max_attempts = max_attempts or settings.SAVE_RETRY_MAX_ATTEMPTS
        self.min_wait_seconds = (
            min_wait_seconds if min_wait_seconds is not None else settings.SAVE_RETRY_MIN_WAIT
        )
        self.max_wait_seconds = (
            max_wait_seconds if max_wait_seconds is not None else settings.SAVE_RETRY_MAX_WAIT
        )
        self.on_failure = on_failure
        self._sleep = sleep
        self._pending: Optional[Workout] = None
        self._in_flight = False
        self._retry_task: Optional[asyncio.Task] = None
        self.last_error: Optional[TransportError] = None

    @property
    def has_pending(self) -> bool:
        """True while a snapshot is waiting to be sent or being sent."""
        return self._pending is not None or self._in_flight

    @property
    def is_retrying(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    async def submit(self, workout: Workout) -> Optional[TransportError]:
        """
        Queue a snapshot of ``workout`` and send it.

        Returns the TransportError of this attempt, or None when the save
        went through or was handed to the save already in flight.
        """
        self._pending = workout.model_copy(deep=True)
        if self._in_flight:
            logger.debug(f"Save in flight for workout {workout.id}; newest snapshot queued")
            return None
        return await self.flush()

    async def flush(self) -> Optional[TransportError]:
        """Send the pending snapshot now, if any."""
        if self._in_flight or self._pending is None:
            return None
        self._cancel_retry()
        try:
            await self._drain()
        except TransportError as e:
            logger.warning(f"Saving workout progress failed: {e}")
            self._schedule_retry(e)
            return e
        return None

    async def notify_online(self) -> Optional[TransportError]:
        """Network is back: retry immediately instead of waiting for the backoff."""
        return await self.flush()

    async def aclose(self) -> None:
        """Stop background retries. Unsent progress is dropped."""
        task = self._retry_task
        self._cancel_retry()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _drain(self) -> None:
        self._in_flight = True
        try:
            while self._pending is not None:
                snapshot, self._pending = self._pending, None
                try:
                    await self.gateway.save(snapshot)
                except (TransportError, asyncio.CancelledError) as e:
                    # Keep the unsent snapshot unless a newer one arrived meanwhile
                    if self._pending is None:
                        self._pending = snapshot
                    if isinstance(e, TransportError):
                        self.last_error = e
                    raise
                self.last_error = None
        finally:
            self._in_flight = False

    def _schedule_retry(self, error: TransportError) -> None:
        if not is_retryable_error(error):
            logger.warning("Save rejected by the server; snapshot kept until the next change")
            return
        if self.is_retrying:
            return
        self._retry_task = asyncio.ensure_future(self._retry_in_background())

    def _cancel_retry(self) -> None:
        if self._retry_task is not None and not self._retry_task.done():
            self._retry_task.cancel()
        self._retry_task = None

    async def _retry_in_background(self) -> None:
        retrying = create_async_retrying(
            max_attempts=self.max_attempts,
            min_wait_seconds=self.min_wait_seconds,
            max_wait_seconds=self.max_wait_seconds,
            sleep=self._sleep,
        )
        try:
            await self._sleep(backoff_delay(1, self.min_wait_seconds, self.max_wait_seconds))
            async for attempt in retrying:
                with attempt:
                    await self._drain()
            logger.info("Queued workout progress saved after retry")
        except TransportError as e:
            logger.error(f"Giving up on background save after {self.max_attempts} attempts: {e}")
            if self.on_failure is not None:
                self.on_failure(e)
        finally:
            if self._retry_task is asyncio.current_task():
                self._retry_task = None
