"""In-memory registry of running workout sessions and route dependencies."""
import logging
from typing import Dict, Optional

from fastapi import Header

from workout_runner.engine.sequencer import WorkoutSequencer
from workout_runner.engine.timers import AsyncioScheduler, Scheduler
from workout_runner.sync.gateway import HttpWorkoutGateway, PersistenceGateway, SessionContext

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Sessions keyed by workout id; at most one per workout."""

    def __init__(self) -> None:
        self._sessions: Dict[str, WorkoutSequencer] = {}

    def find(self, workout_id: str) -> Optional[WorkoutSequencer]:
        return self._sessions.get(workout_id)

    def add(self, workout_id: str, sequencer: WorkoutSequencer) -> None:
        self._sessions[workout_id] = sequencer

    async def remove(self, workout_id: str) -> bool:
        sequencer = self._sessions.pop(workout_id, None)
        if sequencer is None:
            return False
        await sequencer.aclose()
        logger.info(f"Closed session for workout {workout_id}")
        return True

    async def close_all(self) -> None:
        for workout_id in list(self._sessions):
            await self.remove(workout_id)

    def __len__(self) -> int:
        return len(self._sessions)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return _registry


def get_scheduler() -> Scheduler:
    return AsyncioScheduler()


def get_gateway(
    authorization: Optional[str] = Header(None),
    x_request_id: Optional[str] = Header(None, alias="X-Request-Id"),
) -> PersistenceGateway:
    """Gateway acting on behalf of the caller; the token is forwarded as is."""
    return HttpWorkoutGateway(SessionContext(access_token=authorization, request_id=x_request_id))
