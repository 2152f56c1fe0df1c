"""Configuration management for the dispatch engine."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis Configuration
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Security
    password_schemes: list[str] = Field(
        default_factory=lambda: ["argon2"],
        description="passlib schemes accepted for stored driver passwords",
    )

    # Communications
    mail_from: str = Field(
        default="no-reply@delivery-dispatch.local",
        description="Sender address for outgoing mail",
    )
    default_notification_settings: dict[str, bool] = Field(
        default_factory=lambda: {"REQUEST_DRIVER": True, "CHAT": True},
        description="Push categories enabled for newly created drivers",
    )

    # Order lifecycle
    enforce_disposition_transitions: bool = Field(
        default=False,
        description="Refuse disposition changes outside the declared transition graph",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
