"""Application configuration settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from TILT2048_* environment variables or a .env file."""

    app_name: str = "2048 Game API"
    app_version: str = "1.1.0"

    # Game settings
    board_size: int = Field(default=4, ge=2)

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    rate_limit: str = "100/minute"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TILT2048_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
