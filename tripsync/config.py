"""
Runtime configuration helpers for the FastAPI application.

Loads DATABASE_URL and the other variables from the .env file located in the
project root, without overriding values provided by the platform.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

PLACEHOLDER_SECRETS = {"changeme", "change-me", "placeholder", "secret", "your-secret-key"}

load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required; read from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="TripSync Backend", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")
    media_root: str = Field(default="media", alias="MEDIA_ROOT")

    # Checked when tokens are signed or decoded
    jwt_secret_key: str | None = Field(default=None, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_minutes: int = Field(default=60, alias="ACCESS_TOKEN_MINUTES")
    refresh_token_days: int = Field(default=7, alias="REFRESH_TOKEN_DAYS")
    cookie_secure: bool = Field(default=False, alias="COOKIE_SECURE")

    dm_cleanup_interval_minutes: int = Field(default=60, alias="DM_CLEANUP_INTERVAL_MINUTES")
    disable_cleanup: bool = Field(default=False, alias="DISABLE_CLEANUP")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def _reject_placeholder_secret(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if value.strip().lower() in PLACEHOLDER_SECRETS:
            raise ValueError("JWT_SECRET_KEY must not use a placeholder value")
        return value.strip()


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging() -> None:
    """Apply the configured log level to the root logger."""

    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


__all__ = ["Settings", "get_settings", "configure_logging"]
