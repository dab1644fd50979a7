"""Completion and summary metrics derived from a workout."""
import math
from typing import Iterable

from workout_runner.models import Exercise, Workout

# Seconds assumed for a rep-based set when estimating duration
SECONDS_PER_REP_SET = 30
# Warm-up and transitions added to every estimate
WARMUP_MINUTES = 5


def count_sets(workout: Workout) -> tuple[int, int]:
    """Return (completed, total) set counts across all exercises."""
    completed = 0
    total = 0
    for exercise in workout.exercises:
        for workout_set in exercise.sets:
            total += 1
            if workout_set.is_completed:
                completed += 1
    return completed, total


def completion_percentage(workout: Workout) -> int:
    """
    Percentage of completed sets, 0-100.

    Always computed from the full set list, never patched incrementally.
    Halves round up, so 1 of 8 sets reads as 13.
    """
    completed, total = count_sets(workout)
    if total == 0:
        return 0
    return int(math.floor(100 * completed / total + 0.5))


def exercise_volume(exercise: Exercise) -> float:
    """Target volume (reps x weight) summed over the exercise's sets."""
    volume = 0.0
    for workout_set in exercise.sets:
        if workout_set.target_reps and workout_set.target_weight:
            volume += workout_set.target_reps * workout_set.target_weight
    return volume


def estimated_duration_minutes(exercises: Iterable[Exercise]) -> int:
    """Rough session length in minutes, including rest and warm-up."""
    total_minutes = 0.0
    for exercise in exercises:
        for workout_set in exercise.sets:
            if workout_set.target_reps:
                total_minutes += (SECONDS_PER_REP_SET + workout_set.rest_time) / 60
            elif workout_set.target_duration:
                total_minutes += (workout_set.target_duration + workout_set.rest_time) / 60
    return math.ceil(total_minutes) + WARMUP_MINUTES
