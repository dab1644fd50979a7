"""Session engine: sequencer, timers, progress metrics and input capture."""
from .capture import default_entry, parse_set_entry
from .events import SessionEvent, SessionEvents, SessionEventType
from .progress import completion_percentage, estimated_duration_minutes, exercise_volume
from .sequencer import SessionUpdate, WorkoutSequencer
from .timers import AsyncioScheduler, ElapsedClock, RestTimer, Scheduler

__all__ = [
    "AsyncioScheduler",
    "ElapsedClock",
    "RestTimer",
    "Scheduler",
    "SessionEvent",
    "SessionEventType",
    "SessionEvents",
    "SessionUpdate",
    "WorkoutSequencer",
    "completion_percentage",
    "default_entry",
    "estimated_duration_minutes",
    "exercise_volume",
    "parse_set_entry",
]
