"""
Application configuration using Pydantic Settings.

Loads environment variables and provides typed configuration access
for the pathway service, its relational store and the advisory backend.
"""

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional

from healthflow.core.paths import DATA_DIR, REFERENCE_DATA_FILE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "HealthFlow"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Database - PostgreSQL by default, SQLite when USE_SQLITE is set
    DATABASE_URL: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{DATA_DIR / 'local_dev.db'}" if os.environ.get("USE_SQLITE") else "postgresql://localhost:5432/healthflow"
    )
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Reference catalog (bundled JSON, loaded once at startup)
    REFERENCE_DATA_PATH: Path = REFERENCE_DATA_FILE

    # Resolution defaults
    DEFAULT_COUNTRY: str = "India"
    DEFAULT_CURRENCY_SYMBOL: str = "₹"
    NATIONAL_AVERAGE_COST: float = 200000
    DEFAULT_RECOVERY_DAYS: int = 14

    # Advisory model (OpenAI-compatible chat completions, Groq by default)
    ADVISORY_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    ADVISORY_MODEL: str = "llama-3.1-8b-instant"
    ADVISORY_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    ADVISORY_TIMEOUT_SECONDS: float = 8.0
    ADVISORY_MAX_CONTEXT_CHARS: int = 1500
    ADVISORY_MAX_TOKENS: int = 300

    # Error tracking
    SENTRY_DSN: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def advisory_api_key(self) -> Optional[str]:
        """Key used for the advisory backend; GROQ_API_KEY is accepted as an alias."""
        return self.ADVISORY_API_KEY or self.GROQ_API_KEY


settings = Settings()
