# gistbot/config.py
"""
Centralized configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Priority: environment variables > .env file > defaults.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gist store settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_URL: str = Field(
        default="sqlite:///./gists.db",
        description="SQLAlchemy database URL (SQLite or PostgreSQL)"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Echo SQL statements"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOGS_DIR: str = Field(
        default="logs",
        description="Directory for access.log and error.log"
    )

    # --- Tracing ---
    SERVICE_NAME: str = Field(
        default="gistbot",
        description="service.name reported to OpenTelemetry"
    )
    TRACING_ENABLED: bool = Field(
        default=False,
        description="Install the OpenTelemetry tracer provider"
    )

    # --- Gists ---
    EPHEMERAL_RETENTION_SECONDS: Optional[int] = Field(
        default=None,
        description="Age after which ephemeral gists are purged; unset disables purging"
    )
    GIST_ID_LENGTH: int = Field(
        default=8,
        description="Length of generated gist ids"
    )
    GIST_ID_MAX_ATTEMPTS: int = Field(
        default=5,
        description="How many fresh ids to try when a generated id collides"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper

    @field_validator("EPHEMERAL_RETENTION_SECONDS")
    @classmethod
    def validate_retention(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("EPHEMERAL_RETENTION_SECONDS must be positive")
        return v

    @field_validator("GIST_ID_LENGTH")
    @classmethod
    def validate_id_length(cls, v: int) -> int:
        if not 4 <= v <= 64:
            raise ValueError("GIST_ID_LENGTH must be between 4 and 64")
        return v

    @field_validator("GIST_ID_MAX_ATTEMPTS")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("GIST_ID_MAX_ATTEMPTS must be at least 1")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Singleton instance for easy import ---
settings = get_settings()


# --- Module-level exports ---
# These allow code using `config.DATABASE_URL` style access.

# Database
DATABASE_URL: str = settings.DB_URL

DEBUG: bool = settings.DEBUG
LOG_LEVEL: str = settings.LOG_LEVEL
SERVICE_NAME: str = settings.SERVICE_NAME

# --- Paths (relative LOGS_DIR resolves against the working directory) ---
LOGS_PATH: str = os.path.abspath(settings.LOGS_DIR)
