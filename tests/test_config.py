"""Tests for environment-driven settings."""
from workout_runner.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "ENVIRONMENT",
            "WORKOUT_API_URL",
            "WORKOUT_API_TIMEOUT",
            "SAVE_RETRY_MAX_ATTEMPTS",
            "CORS_ORIGINS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.ENVIRONMENT == "development"
        assert settings.WORKOUT_API_URL == "http://localhost:3000"
        assert settings.WORKOUT_API_TIMEOUT == 10.0
        assert settings.SAVE_RETRY_MAX_ATTEMPTS == 5
        assert settings.CORS_ORIGINS == ["http://localhost:8081", "http://localhost:19006"]

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "Production")
        monkeypatch.setenv("WORKOUT_API_URL", "https://api.example.com/")
        monkeypatch.setenv("SAVE_RETRY_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("SAVE_RETRY_MIN_WAIT", "0.5")
        monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com, ")

        settings = Settings()

        assert settings.ENVIRONMENT == "production"
        assert settings.WORKOUT_API_URL == "https://api.example.com"
        assert settings.SAVE_RETRY_MAX_ATTEMPTS == 2
        assert settings.SAVE_RETRY_MIN_WAIT == 0.5
        assert settings.CORS_ORIGINS == ["https://app.example.com"]

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "qa")
        monkeypatch.setenv("WORKOUT_API_TIMEOUT", "soon")
        monkeypatch.setenv("SAVE_RETRY_MAX_ATTEMPTS", "0")

        settings = Settings()

        assert settings.ENVIRONMENT == "development"
        assert settings.WORKOUT_API_TIMEOUT == 10.0
        assert settings.SAVE_RETRY_MAX_ATTEMPTS == 1
