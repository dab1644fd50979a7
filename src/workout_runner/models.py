"""Data models for workout execution."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from workout_runner.utils import to_number

logger = logging.getLogger(__name__)

ExerciseType = Literal["strength", "cardio", "flexibility"]


class WorkoutSet(BaseModel):
    """Represents a single set within an exercise."""
    id: str
    set_number: int = Field(ge=1)  # 1-based position within the exercise
    target_reps: Optional[int] = None
    target_weight: Optional[float] = None
    target_duration: Optional[int] = None  # seconds, for timed sets
    rest_time: int = Field(ge=0)  # rest after this set, in seconds
    is_completed: bool = False
    actual_reps: Optional[float] = None
    actual_weight: Optional[float] = None
    actual_duration: Optional[float] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    @property
    def is_timed(self) -> bool:
        return self.target_reps is None and self.target_duration is not None

    def mark_completed(
        self,
        reps: Optional[float] = None,
        weight: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> None:
        """Complete the set, defaulting missing actuals to the targets."""
        self.is_completed = True
        self.actual_reps = reps if reps is not None else self.target_reps
        self.actual_weight = weight if weight is not None else self.target_weight
        self.actual_duration = duration if duration is not None else self.target_duration


class Exercise(BaseModel):
    """Represents an exercise and its ordered sets."""
    id: str
    name: str
    sets: List[WorkoutSet] = Field(min_length=1)
    type: Optional[ExerciseType] = None
    is_completed: bool = False
    # Descriptive fields, carried through to the server untouched
    description: Optional[str] = None
    muscles: Optional[List[str]] = None
    equipment: Optional[str] = None
    video_url: Optional[str] = None
    note: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    @property
    def all_sets_completed(self) -> bool:
        return all(s.is_completed for s in self.sets)


class Workout(BaseModel):
    """Represents a complete workout as stored remotely."""
    id: str
    name: str
    exercises: List[Exercise] = Field(default_factory=list)
    completion_status: int = Field(default=0, ge=0, le=100)
    description: Optional[str] = None
    program_id: Optional[str] = None
    program_name: Optional[str] = None
    scheduled_date: Optional[str] = None
    estimated_duration: Optional[int] = None  # minutes
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON body the workout store expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def reordered(self, exercise_ids: Sequence[str]) -> "Workout":
        """
        Return a copy with exercises in the given order.

        The ids must be a permutation of the current exercise ids; the
        drag-and-drop list hands over its final order, nothing else changes.
        """
        by_id = {ex.id: ex for ex in self.exercises}
        if len(exercise_ids) != len(self.exercises) or set(exercise_ids) != set(by_id):
            raise ValueError("Exercise order must list every exercise exactly once")
        copy = self.model_copy(deep=True)
        copy.exercises = [by_id[ex_id].model_copy(deep=True) for ex_id in exercise_ids]
        return copy


class SetInput(BaseModel):
    """
    Actual values entered for a completed set.

    Anything that is not a finite number is treated as not entered, so the
    set falls back to its target value.
    """
    reps: Optional[float] = None
    weight: Optional[float] = None
    duration: Optional[float] = None

    class Config:
        extra = "ignore"

    @field_validator("reps", "weight", "duration", mode="before")
    @classmethod
    def _drop_invalid(cls, value: Any) -> Optional[float]:
        number = to_number(value)
        if number is None and value is not None:
            logger.debug(f"Ignoring non-numeric set input {value!r}; using target")
        return number


class SessionStatus(str, Enum):
    ACTIVE = "active"
    RESTING = "resting"
    COMPLETE = "complete"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETE, SessionStatus.ABORTED)


@dataclass(frozen=True)
class SessionPosition:
    """Pointer to the current exercise and set of a running session."""
    exercise_index: int
    set_index: int
