"""
Workout sequencer

Drives one workout session: walks the exercises and their sets in order,
applies set completion, exercise skips and early endings to the workout,
suspends between sets for rest, and hands every change to the progress
writer so the remote copy follows along.

States: active -> resting -> active ... -> complete | aborted. Complete and
aborted are terminal; any mutating call after them raises
InvalidSessionState.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from workout_runner.engine.events import SessionEvent, SessionEvents, SessionEventType
from workout_runner.engine.progress import completion_percentage
from workout_runner.engine.timers import AsyncioScheduler, ElapsedClock, RestTimer, Scheduler
from workout_runner.errors import InvalidSessionState, TransportError, WorkoutNotFound
from workout_runner.models import (
    Exercise,
    SessionPosition,
    SessionStatus,
    SetInput,
    Workout,
    WorkoutSet,
)
from workout_runner.sync.gateway import PersistenceGateway
from workout_runner.sync.writer import ProgressWriter

logger = logging.getLogger(__name__)


@dataclass
class SessionUpdate:
    """Result of a sequencer operation."""
    status: SessionStatus
    position: Optional[SessionPosition]  # None once the session is complete
    completion_status: int
    rest_seconds: int = 0
    save_error: Optional[TransportError] = None


class WorkoutSequencer:
    """State machine for a single workout session."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        scheduler: Optional[Scheduler] = None,
        writer: Optional[ProgressWriter] = None,
        events: Optional[SessionEvents] = None,
    ):
        self.gateway = gateway
        self.scheduler = scheduler or AsyncioScheduler()
        self.writer = writer or ProgressWriter(gateway)
        if self.writer.on_failure is None:
            self.writer.on_failure = self._on_background_save_failure
        self.events = events or SessionEvents()
        self.rest_timer = RestTimer(self.scheduler)
        self.clock = ElapsedClock(self.scheduler)

        self._workout: Optional[Workout] = None
        self._position: Optional[SessionPosition] = None
        self._status: Optional[SessionStatus] = None
        self._busy = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def workout(self) -> Optional[Workout]:
        return self._workout

    @property
    def status(self) -> Optional[SessionStatus]:
        return self._status

    @property
    def position(self) -> Optional[SessionPosition]:
        return self._position

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def completion_status(self) -> int:
        return self._workout.completion_status if self._workout else 0

    @property
    def elapsed_seconds(self) -> int:
        return self.clock.elapsed_seconds

    @property
    def rest_remaining_seconds(self) -> int:
        return self.rest_timer.remaining_seconds if self._status is SessionStatus.RESTING else 0

    @property
    def current_exercise(self) -> Optional[Exercise]:
        if self._workout is None or self._position is None:
            return None
        return self._workout.exercises[self._position.exercise_index]

    @property
    def current_set(self) -> Optional[WorkoutSet]:
        exercise = self.current_exercise
        if exercise is None:
            return None
        return exercise.sets[self._position.set_index]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self, workout_id: str) -> SessionUpdate:
        """Load ``workout_id`` through the gateway and initialize the session."""
        workout = await self.gateway.load(workout_id)
        return self.initialize(workout)

    def initialize(self, workout: Workout) -> SessionUpdate:
        if self._workout is not None:
            raise InvalidSessionState("Session already initialized")
        if not workout.exercises:
            raise WorkoutNotFound(f"Workout {workout.id} has no exercises")

        # Loaded flags may be stale; derive them from the sets
        for exercise in workout.exercises:
            exercise.is_completed = exercise.all_sets_completed
        workout.completion_status = completion_percentage(workout)

        # Needs a running loop with the default scheduler; nothing is committed if it fails
        self.clock.start()
        self._workout = workout
        self._position = SessionPosition(0, 0)
        self._status = SessionStatus.ACTIVE
        logger.info(
            f"Started session for workout {workout.id} "
            f"({len(workout.exercises)} exercises, {workout.completion_status}% done)"
        )
        return self._update()

    async def complete_current_set(self, values: Optional[SetInput] = None) -> SessionUpdate:
        """
        Mark the current set done and move to the next set or exercise.

        Values left out of ``values`` default to the set's targets. A failed
        save is returned on the update; the local change stands.
        """
        self._require_running()
        if self._status is SessionStatus.RESTING:
            raise InvalidSessionState("Rest in progress; skip or wait for it before the next set")

        values = values or SetInput()
        workout = self._workout
        position = self._position
        exercise = workout.exercises[position.exercise_index]
        finished_set = exercise.sets[position.set_index]

        finished_set.mark_completed(values.reps, values.weight, values.duration)
        exercise.is_completed = exercise.all_sets_completed
        workout.completion_status = completion_percentage(workout)

        save_error = await self._save()

        rest_seconds = 0
        if position.set_index < len(exercise.sets) - 1:
            self._position = SessionPosition(position.exercise_index, position.set_index + 1)
            if finished_set.rest_time > 0:
                rest_seconds = finished_set.rest_time
                self._begin_rest(rest_seconds)
        elif position.exercise_index < len(workout.exercises) - 1:
            self._position = SessionPosition(position.exercise_index + 1, 0)
        else:
            self._finish(SessionStatus.COMPLETE)

        return self._update(rest_seconds=rest_seconds, save_error=save_error)

    def skip_current_exercise(self) -> SessionUpdate:
        """Leave the rest of the current exercise undone and move on."""
        self._require_running()
        self._cancel_rest()

        index = self._position.exercise_index
        skipped = self._workout.exercises[index]
        logger.info(f"Skipping exercise {skipped.name!r} of workout {self._workout.id}")
        if index < len(self._workout.exercises) - 1:
            self._position = SessionPosition(index + 1, 0)
        else:
            self._finish(SessionStatus.COMPLETE)
        return self._update()

    async def end_early(self) -> SessionUpdate:
        """Save progress as it stands and abort the session."""
        self._require_running()
        self._cancel_rest()
        self._workout.completion_status = completion_percentage(self._workout)

        save_error = await self._save()
        self._finish(SessionStatus.ABORTED)
        return self._update(save_error=save_error)

    def skip_rest(self) -> bool:
        """End the current rest now. Returns False if no rest is running."""
        self._require_running()
        if self._status is not SessionStatus.RESTING:
            return False
        return self.rest_timer.skip()

    async def aclose(self) -> None:
        """Tear the session down: stop the timers and background saves."""
        self.rest_timer.cancel()
        self.clock.stop()
        await self.writer.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_running(self) -> None:
        if self._workout is None:
            raise InvalidSessionState("Session not initialized")
        if self._status.is_terminal:
            raise InvalidSessionState(f"Session already {self._status.value}")
        if self._busy:
            raise InvalidSessionState("Previous change is still being saved")

    async def _save(self) -> Optional[TransportError]:
        self._busy = True
        try:
            save_error = await self.writer.submit(self._workout)
        finally:
            self._busy = False
        if save_error is not None:
            self._emit(
                SessionEventType.SAVE_FAILED,
                message=str(save_error),
                status_code=save_error.status_code,
            )
        return save_error

    def _begin_rest(self, seconds: int) -> None:
        self._status = SessionStatus.RESTING
        self._emit(SessionEventType.REST_STARTED, seconds=seconds)
        self.rest_timer.start(seconds, self._on_rest_finished)

    def _on_rest_finished(self) -> None:
        if self._status is not SessionStatus.RESTING:
            return
        self._status = SessionStatus.ACTIVE
        self._emit(SessionEventType.REST_FINISHED)

    def _cancel_rest(self) -> None:
        """Cut a running rest short; listeners still see it end."""
        if self._status is not SessionStatus.RESTING:
            return
        self.rest_timer.cancel()
        self._status = SessionStatus.ACTIVE
        self._emit(SessionEventType.REST_FINISHED, cancelled=True)

    def _finish(self, status: SessionStatus) -> None:
        self._status = status
        self.rest_timer.cancel()
        self.clock.stop()
        if status is SessionStatus.COMPLETE:
            self._position = None
            event_type = SessionEventType.SESSION_COMPLETE
        else:
            event_type = SessionEventType.SESSION_ABORTED
        logger.info(
            f"Session for workout {self._workout.id} {status.value} at "
            f"{self._workout.completion_status}% after {self.clock.elapsed_seconds}s"
        )
        self._emit(
            event_type,
            completion_status=self._workout.completion_status,
            elapsed_seconds=self.clock.elapsed_seconds,
        )

    def _on_background_save_failure(self, error: TransportError) -> None:
        self._emit(
            SessionEventType.SAVE_FAILED,
            message=str(error),
            status_code=error.status_code,
            background=True,
        )

    def _emit(self, event_type: SessionEventType, **detail) -> None:
        workout_id = self._workout.id if self._workout else ""
        self.events.emit(SessionEvent(type=event_type, workout_id=workout_id, detail=detail))

    def _update(
        self,
        rest_seconds: int = 0,
        save_error: Optional[TransportError] = None,
    ) -> SessionUpdate:
        return SessionUpdate(
            status=self._status,
            position=self._position,
            completion_status=self._workout.completion_status,
            rest_seconds=rest_seconds,
            save_error=save_error,
        )
