"""Observable session signals consumed by the navigation layer."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class SessionEventType(str, Enum):
    REST_STARTED = "rest_started"
    REST_FINISHED = "rest_finished"
    SESSION_COMPLETE = "session_complete"
    SESSION_ABORTED = "session_aborted"
    SAVE_FAILED = "save_failed"


_TERMINAL = (SessionEventType.SESSION_COMPLETE, SessionEventType.SESSION_ABORTED)


@dataclass
class SessionEvent:
    type: SessionEventType
    workout_id: str
    detail: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[SessionEvent], None]


class SessionEvents:
    """
    Fan-out of session events to subscribers.

    The session-end signal (complete or aborted) is delivered at most once,
    whatever path the sequencer took to get there.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._ended: Optional[SessionEventType] = None

    @property
    def ended(self) -> Optional[SessionEventType]:
        return self._ended

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: SessionEvent) -> bool:
        """Deliver ``event``. Returns False if it was a repeated end signal."""
        if event.type in _TERMINAL:
            if self._ended is not None:
                logger.debug(f"Dropping duplicate end signal {event.type.value}")
                return False
            self._ended = event.type

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Session event listener failed for {event.type.value}")
        return True
