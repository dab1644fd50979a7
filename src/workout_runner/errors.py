"""Error types raised by the workout runner."""
from typing import Optional


class WorkoutRunnerError(RuntimeError):
    """Base class for workout runner failures."""


class WorkoutNotFound(WorkoutRunnerError):
    """Raised when a workout does not exist or has nothing to run."""


class InvalidSessionState(WorkoutRunnerError):
    """Raised when an operation is not allowed in the current session state."""


class TransportError(WorkoutRunnerError):
    """Raised when loading or saving a workout fails on the network."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
