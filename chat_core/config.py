"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with validation.
"""
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the message state core, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode (echoes SQL)")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./chat_core.db",
        description="Async database URL (postgresql+asyncpg://... in production)"
    )
    database_url_sync: str = Field(
        default="sqlite:///./chat_core.db",
        description="Sync database URL for Alembic"
    )

    # Redis
    redis_url: str = Field(default="", description="Redis connection URL (empty disables caching)")
    redis_password: str = Field(default="", description="Redis password")

    # Events
    broadcasts: bool = Field(default=True, description="Dispatch MessageSent events after a message is sent")
    sender_fields_whitelist: str = Field(
        default="",
        validate_default=True,
        description="Comma-separated sender fields exposed in MessageSent payloads (empty exposes all)"
    )

    # Conversation listing
    conversations_per_page: int = Field(default=25, ge=1, le=200, description="Default page size for conversation summaries")

    # Cache TTL (in seconds)
    cache_unread_ttl: int = Field(default=60, description="Unread count cache TTL in seconds")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: json or text")

    @field_validator("sender_fields_whitelist")
    @classmethod
    def parse_sender_fields(cls, v: str) -> List[str]:
        """Parse comma-separated sender fields into a list."""
        if isinstance(v, list):
            return v
        return [field.strip() for field in v.split(",") if field.strip()]


# Global settings instance
settings = Settings()
