"""
FORMCOACH Configuration

Environment variables and application settings.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "FORMCOACH"
    DEBUG: bool = True

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Form analysis
    ERROR_PERSIST_MS: int = 3000
    SMOOTHING_ENABLED: bool = False
    SMOOTHING_WINDOW: int = 5

    # Feedback text
    DEFAULT_LOCALE: str = "en"

    # Sessions
    GOOD_REP_SCORE: int = 70
    MAX_ACTIVE_SESSIONS: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
