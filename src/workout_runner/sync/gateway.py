"""Remote workout store: gateway contract and its HTTP implementation."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from workout_runner.config import settings
from workout_runner.errors import TransportError, WorkoutNotFound
from workout_runner.models import Workout


logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Caller identity and endpoint, passed explicitly to the gateway."""

    base_url: str = field(default_factory=lambda: settings.WORKOUT_API_URL)
    access_token: Optional[str] = None
    request_id: Optional[str] = None

    def to_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}

        if self.access_token:
            token = self.access_token
            if not token.lower().startswith("bearer "):
                token = f"Bearer {token}"
            headers["Authorization"] = token

        if self.request_id:
            headers["X-Request-Id"] = self.request_id

        return headers


class PersistenceGateway(ABC):
    """Load and save a workout against a remote store."""

    @abstractmethod
    async def load(self, workout_id: str) -> Workout:
        """Fetch a workout. Raises WorkoutNotFound or TransportError."""
        ...

    @abstractmethod
    async def save(self, workout: Workout) -> None:
        """Store the full workout. Raises TransportError on any failure."""
        ...


class HttpWorkoutGateway(PersistenceGateway):
    """Gateway speaking to the workouts REST endpoint with httpx."""

    def __init__(
        self,
        context: Optional[SessionContext] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.context = context or SessionContext()
        self.timeout = timeout if timeout is not None else settings.WORKOUT_API_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.context.base_url,
            headers=self.context.to_headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _path(workout_id: str) -> str:
        return f"/workouts/{quote(str(workout_id), safe='')}"

    async def load(self, workout_id: str) -> Workout:
        try:
            async with self._client() as client:
                response = await client.get(self._path(workout_id))
        except httpx.HTTPError as e:
            logger.warning(f"Loading workout {workout_id} failed: {e}")
            raise TransportError(f"Failed to load workout {workout_id}: {e}") from e

        if response.status_code == 404:
            raise WorkoutNotFound(f"Workout {workout_id} not found")
        if not response.is_success:
            logger.warning(f"Loading workout {workout_id} returned status {response.status_code}")
            raise TransportError(
                f"Failed to load workout {workout_id}: status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return Workout.model_validate(response.json())
        except ValueError as e:
            logger.warning(f"Workout {workout_id} payload is malformed: {e}")
            raise TransportError(
                f"Malformed workout payload for {workout_id}",
                status_code=response.status_code,
            ) from e

    async def save(self, workout: Workout) -> None:
        try:
            async with self._client() as client:
                response = await client.patch(self._path(workout.id), json=workout.to_payload())
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to save workout {workout.id}: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"Failed to save workout {workout.id}: status {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug(f"Saved workout {workout.id} at {workout.completion_status}%")
