"""Workout execution engine: sequencing, rest timing and progress sync."""
from .engine import SessionUpdate, WorkoutSequencer
from .errors import InvalidSessionState, TransportError, WorkoutNotFound, WorkoutRunnerError
from .models import Exercise, SessionPosition, SessionStatus, SetInput, Workout, WorkoutSet

__all__ = [
    "Exercise",
    "InvalidSessionState",
    "SessionPosition",
    "SessionStatus",
    "SessionUpdate",
    "SetInput",
    "TransportError",
    "Workout",
    "WorkoutNotFound",
    "WorkoutRunnerError",
    "WorkoutSequencer",
    "WorkoutSet",
]
