from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    DATABASE_URL: str = "sqlite:///./talentflow.db"

    # Application
    APP_NAME: str = "TalentFlow"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:5173,"
        "http://localhost:5174,"
        "http://127.0.0.1:5173,"
        "http://127.0.0.1:5174"
    )

    # Simulated network
    LATENCY_MIN_MS: int = 200
    LATENCY_MAX_MS: int = 1200
    FAILURE_RATE: float = 0.08

    # Seeding
    SEED_ON_STARTUP: bool = True
    SEED_JOB_COUNT: int = 25
    SEED_CANDIDATE_COUNT: int = 1000
    SEED_RANDOM_SEED: Optional[int] = None


settings = Settings()
