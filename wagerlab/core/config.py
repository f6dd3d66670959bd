"""
Configuration Management for WagerLab.

Uses pydantic-settings for environment variable loading and validation.
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Settings.

    Loads configuration from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # App Info
    APP_NAME: str = "WagerLab Edge Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Slate display
    DISPLAY_TIMEZONE: str = "America/New_York"

    # Consensus
    CONSENSUS_WEIGHTING: Literal["equal", "games"] = "equal"
    SINGLE_MODEL_CONFIDENCE: float = Field(default=70.0, ge=0.0, le=100.0)

    # API
    CORS_ORIGINS: str = "*"
    RATE_LIMIT: str = "60/minute"


settings = Settings()
