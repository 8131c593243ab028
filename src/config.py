"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str = "sqlite:///./nexus.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Calendar boundaries (day/week/month) are evaluated in this zone
    SYNC_TIMEZONE: str = "UTC"

    # "sql" | "memory"
    PERSISTENCE_BACKEND: str = "sql"

    NEXUS_DEFAULT_NAME: str = "New Nexus"

    # AI Provider settings
    AI_PROVIDER: str = "mock"
    AI_API_KEY: Optional[str] = None
    AI_MODEL: Optional[str] = None


settings = Settings()
