"""API routes for controlling workout sessions."""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from workout_runner.engine.capture import default_entry, parse_set_entry
from workout_runner.engine.progress import estimated_duration_minutes, exercise_volume
from workout_runner.engine.sequencer import SessionUpdate, WorkoutSequencer
from workout_runner.engine.timers import Scheduler
from workout_runner.errors import InvalidSessionState, TransportError, WorkoutNotFound
from workout_runner.models import SessionStatus, SetInput
from workout_runner.sync.gateway import PersistenceGateway
from workout_runner.utils import format_elapsed
from workout_runner.api.sessions import (
    SessionRegistry,
    get_gateway,
    get_registry,
    get_scheduler,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Response / request models
# ---------------------------------------------------------------------------


class SessionState(BaseModel):
    workout_id: str
    workout_name: str
    status: SessionStatus
    exercise_index: Optional[int] = None
    set_index: Optional[int] = None
    current_exercise: Optional[str] = None
    current_set_number: Optional[int] = None
    suggested_entry: Optional[str] = None  # prompt text pre-filled from the set's targets
    completion_status: int
    total_volume: float = 0.0
    estimated_minutes: int = 0
    rest_remaining_seconds: int = 0
    elapsed_seconds: int = 0
    elapsed: str = "00:00"
    save_pending: bool = False
    save_error: Optional[str] = None


class CompleteSetRequest(SetInput):
    """Set values as numbers, or as the free-text ``entry`` typed into the prompt."""
    entry: Optional[str] = None


class ReorderRequest(BaseModel):
    exercise_ids: List[str] = Field(alias="exerciseIds")

    class Config:
        populate_by_name = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _state(sequencer: WorkoutSequencer, update: Optional[SessionUpdate] = None) -> SessionState:
    workout = sequencer.workout
    position = sequencer.position
    exercise = sequencer.current_exercise
    workout_set = sequencer.current_set
    save_error = update.save_error if update else sequencer.writer.last_error
    return SessionState(
        workout_id=workout.id,
        workout_name=workout.name,
        status=sequencer.status,
        exercise_index=position.exercise_index if position else None,
        set_index=position.set_index if position else None,
        current_exercise=exercise.name if exercise else None,
        current_set_number=workout_set.set_number if workout_set else None,
        suggested_entry=default_entry(workout_set) if workout_set else None,
        completion_status=sequencer.completion_status,
        total_volume=sum(exercise_volume(e) for e in workout.exercises),
        estimated_minutes=estimated_duration_minutes(workout.exercises),
        rest_remaining_seconds=sequencer.rest_remaining_seconds,
        elapsed_seconds=sequencer.elapsed_seconds,
        elapsed=format_elapsed(sequencer.elapsed_seconds),
        save_pending=sequencer.writer.has_pending,
        save_error=str(save_error) if save_error else None,
    )


def _lookup(registry: SessionRegistry, workout_id: str) -> WorkoutSequencer:
    sequencer = registry.find(workout_id)
    if sequencer is None:
        raise HTTPException(status_code=404, detail=f"No session for workout {workout_id}")
    return sequencer


# ---------------------------------------------------------------------------
# Session routes
# ---------------------------------------------------------------------------


@router.post("/sessions/{workout_id}", status_code=201, response_model=SessionState)
async def start_session(
    workout_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
    scheduler: Scheduler = Depends(get_scheduler),
    registry: SessionRegistry = Depends(get_registry),
):
    existing = registry.find(workout_id)
    if existing is not None and not existing.status.is_terminal:
        raise HTTPException(status_code=409, detail=f"Session already running for workout {workout_id}")

    sequencer = WorkoutSequencer(gateway, scheduler=scheduler)
    try:
        await sequencer.start(workout_id)
    except WorkoutNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportError as e:
        logger.warning(f"Could not start session for workout {workout_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    # Another start for the same workout may have finished while this one was loading
    existing = registry.find(workout_id)
    if existing is not None and not existing.status.is_terminal:
        await sequencer.aclose()
        raise HTTPException(status_code=409, detail=f"Session already running for workout {workout_id}")

    if existing is not None:
        await registry.remove(workout_id)
    registry.add(workout_id, sequencer)
    return _state(sequencer)


@router.get("/sessions/{workout_id}", response_model=SessionState)
async def get_session(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _state(_lookup(registry, workout_id))


@router.post("/sessions/{workout_id}/sets/complete", response_model=SessionState)
async def complete_set(
    workout_id: str,
    values: Optional[CompleteSetRequest] = None,
    registry: SessionRegistry = Depends(get_registry),
):
    sequencer = _lookup(registry, workout_id)
    if values is not None and values.entry is not None and sequencer.current_set is not None:
        values = parse_set_entry(values.entry, sequencer.current_set)
    try:
        update = await sequencer.complete_current_set(values)
    except InvalidSessionState as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(sequencer, update)


@router.post("/sessions/{workout_id}/skip-exercise", response_model=SessionState)
async def skip_exercise(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    sequencer = _lookup(registry, workout_id)
    try:
        update = sequencer.skip_current_exercise()
    except InvalidSessionState as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(sequencer, update)


@router.post("/sessions/{workout_id}/skip-rest", response_model=SessionState)
async def skip_rest(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    sequencer = _lookup(registry, workout_id)
    try:
        sequencer.skip_rest()
    except InvalidSessionState as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(sequencer)


@router.post("/sessions/{workout_id}/end", response_model=SessionState)
async def end_session(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    sequencer = _lookup(registry, workout_id)
    try:
        update = await sequencer.end_early()
    except InvalidSessionState as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(sequencer, update)


@router.post("/sessions/{workout_id}/sync", response_model=SessionState)
async def sync_session(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Network is back: send queued progress now instead of waiting for the backoff."""
    sequencer = _lookup(registry, workout_id)
    await sequencer.writer.notify_online()
    return _state(sequencer)


@router.delete("/sessions/{workout_id}", status_code=204)
async def close_session(workout_id: str, registry: SessionRegistry = Depends(get_registry)):
    if not await registry.remove(workout_id):
        raise HTTPException(status_code=404, detail=f"No session for workout {workout_id}")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Workout routes
# ---------------------------------------------------------------------------


@router.post("/workouts/{workout_id}/reorder")
async def reorder_exercises(
    workout_id: str,
    request: ReorderRequest,
    gateway: PersistenceGateway = Depends(get_gateway),
    registry: SessionRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Store a new exercise order handed over by the drag-and-drop list."""
    running = registry.find(workout_id)
    if running is not None and not running.status.is_terminal:
        raise HTTPException(status_code=409, detail="Cannot reorder a workout while its session is running")

    try:
        workout = await gateway.load(workout_id)
    except WorkoutNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))

    try:
        reordered = workout.reordered(request.exercise_ids)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        await gateway.save(reordered)
    except TransportError as e:
        logger.warning(f"Saving new exercise order for {workout_id} failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to save exercise order")

    return reordered.to_payload()
