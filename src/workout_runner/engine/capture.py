"""Free-text entry of the values actually performed for a set."""
from typing import Optional

from workout_runner.models import SetInput, WorkoutSet


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def default_entry(workout_set: WorkoutSet) -> str:
    """Pre-filled prompt text: "reps,weight" for rep sets, seconds for timed sets."""
    if workout_set.target_reps is not None:
        return f"{_fmt(workout_set.target_reps)},{_fmt(workout_set.target_weight or 0)}"
    if workout_set.is_timed:
        return _fmt(workout_set.target_duration)
    return ""


def parse_set_entry(text: Optional[str], workout_set: WorkoutSet) -> SetInput:
    """
    Parse a prompt answer into a SetInput for ``workout_set``.

    Rep-based sets take "reps,weight" (weight optional), timed sets take a
    number of seconds, other sets take nothing. Parts that do not parse are
    left empty so the set keeps its target value.
    """
    text = text or ""
    if workout_set.target_reps is not None:
        parts = [p.strip() for p in text.split(",")]
        reps = parts[0] if parts else None
        weight = parts[1] if len(parts) > 1 else None
        return SetInput(reps=reps, weight=weight)
    if workout_set.is_timed:
        return SetInput(duration=text.strip())
    return SetInput()
