"""
Configuration Settings
======================

Centralized configuration using Pydantic V2 Settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = Field(default="development")
    app_debug: bool = Field(default=False)
    database_url: str = Field(default="sqlite:///./data/nextcut.db")
    db_busy_timeout_seconds: float = Field(default=30.0, gt=0.0)
    minutes_per_customer: int = Field(default=15, ge=0)
    default_search_radius_km: float = Field(default=10.0, gt=0.0)
    log_level: str = Field(default="info")
    log_format: str = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, store lowercase."""
        level = v.strip().lower()
        if level not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unknown log_level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only console and json renderers exist."""
        fmt = v.strip().lower()
        if fmt not in {"console", "json"}:
            raise ValueError(f"log_format must be 'console' or 'json', got {v!r}")
        return fmt

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def print_settings() -> None:
    """Log the effective configuration (nothing in here is secret)."""
    import structlog

    structlog.get_logger().info("effective_settings", **settings.model_dump())
