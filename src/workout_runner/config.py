"""Configuration settings for the workout runner."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"

    # Remote workout store
    WORKOUT_API_URL: str = "http://localhost:3000"
    WORKOUT_API_TIMEOUT: float = 10.0

    # Background save retries
    SAVE_RETRY_MAX_ATTEMPTS: int = 5
    SAVE_RETRY_MIN_WAIT: float = 1.0
    SAVE_RETRY_MAX_WAIT: float = 30.0

    # Session control API
    CORS_ORIGINS: List[str] = []

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Remote workout store
        self.WORKOUT_API_URL = os.getenv("WORKOUT_API_URL", "http://localhost:3000").rstrip("/")
        self.WORKOUT_API_TIMEOUT = _float_env("WORKOUT_API_TIMEOUT", 10.0)

        # Background save retries
        self.SAVE_RETRY_MAX_ATTEMPTS = max(1, _int_env("SAVE_RETRY_MAX_ATTEMPTS", 5))
        self.SAVE_RETRY_MIN_WAIT = _float_env("SAVE_RETRY_MIN_WAIT", 1.0)
        self.SAVE_RETRY_MAX_WAIT = _float_env("SAVE_RETRY_MAX_WAIT", 30.0)

        origins = os.getenv("CORS_ORIGINS", "http://localhost:8081,http://localhost:19006")
        self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]


settings = Settings()
