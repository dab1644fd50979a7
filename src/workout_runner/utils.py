"""Utility functions."""
import math
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Convert user input to a finite float, returning None if conversion fails."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def format_elapsed(seconds: int) -> str:
    """Format a second count as MM:SS, or HH:MM:SS once an hour has passed."""
    seconds = max(0, int(seconds))
    hrs, rem = divmod(seconds, 3600)
    mins, secs = divmod(rem, 60)
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"
