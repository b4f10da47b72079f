from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="VIDEO_STUDIO_", env_file=".env", extra="ignore")

    # Frontend dev server defaults (Next.js / Vite).
    cors_allow_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    log_level: str = "INFO"

    # Prediction provider selection.
    provider_backend: str = "mock"  # mock

    # Mock provider: a prediction is reported as succeeded once strictly more
    # than this many milliseconds have passed since it was created.
    mock_ready_after_ms: int = 5000
    mock_result_url: str = (
        "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4"
    )

    # Client side (poller / CLI).
    api_base_url: str = "http://127.0.0.1:8000"
    poll_interval_seconds: float = 3.0
    poll_max_attempts: int = 60
    # None disables per-request timeouts; the attempt bound is the only limit.
    request_timeout_seconds: float | None = None


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
