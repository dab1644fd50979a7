"""
Test fixtures for workout-runner.

Provides in-memory fakes for the workout store and a manual scheduler so
sessions, rest timers and the API can be tested deterministically and
offline.
"""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

# Repo root: .../workout-runner
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
TESTS = ROOT / "tests"

# Make src/ and the test helpers importable without installing the package
for p in {SRC, TESTS}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from workout_runner.main import app
from workout_runner.api.sessions import SessionRegistry, get_gateway, get_registry, get_scheduler
from workout_runner.models import Workout
from workout_runner.sync.writer import ProgressWriter

from fakes import InMemoryGateway, ManualScheduler, build_workout


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_workout_dict() -> Dict[str, Any]:
    """Workout as returned by GET /workouts/{id}."""
    return {
        "id": "w-100",
        "name": "Upper Body Strength",
        "description": "Chest and back focus",
        "programId": "p-1",
        "programName": "Beginner Strength",
        "scheduledDate": "2026-10-20",
        "estimatedDuration": 45,
        "completionStatus": 0,
        "exercises": [
            {
                "id": "ex-1",
                "name": "Bench Press",
                "type": "strength",
                "muscles": ["chest", "triceps"],
                "equipment": "Barbell",
                "sets": [
                    {"id": "s-1", "setNumber": 1, "targetReps": 10, "targetWeight": 60, "restTime": 90},
                    {"id": "s-2", "setNumber": 2, "targetReps": 8, "targetWeight": 65, "restTime": 90},
                ],
            },
            {
                "id": "ex-2",
                "name": "Plank",
                "type": "flexibility",
                "note": "Keep hips level",
                "sets": [
                    {"id": "s-3", "setNumber": 1, "targetDuration": 60, "restTime": 0},
                ],
            },
        ],
    }


@pytest.fixture
def sample_workout(sample_workout_dict) -> Workout:
    return Workout.model_validate(sample_workout_dict)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def gateway(sample_workout) -> InMemoryGateway:
    return InMemoryGateway([sample_workout, build_workout([[30, 0], [60]], workout_id="w1")])


@pytest.fixture
def fast_writer_factory():
    """Writer with millisecond backoff so retry tests stay fast."""

    def make(gateway, **kwargs) -> ProgressWriter:
        kwargs.setdefault("max_attempts", 3)
        kwargs.setdefault("min_wait_seconds", 0.01)
        kwargs.setdefault("max_wait_seconds", 0.02)
        return ProgressWriter(gateway, **kwargs)

    return make


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client(gateway, scheduler):
    """FastAPI TestClient wired to the in-memory store and manual scheduler."""
    registry = SessionRegistry()
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
