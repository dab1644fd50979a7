"""Remote persistence for workout progress."""
from .gateway import HttpWorkoutGateway, PersistenceGateway, SessionContext
from .retry import backoff_delay, create_async_retrying, is_retryable_error
from .writer import ProgressWriter

__all__ = [
    "HttpWorkoutGateway",
    "PersistenceGateway",
    "ProgressWriter",
    "SessionContext",
    "backoff_delay",
    "create_async_retrying",
    "is_retryable_error",
]
