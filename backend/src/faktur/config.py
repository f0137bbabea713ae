"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from environment variables with the same name.
    Use .env file for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./faktur.db",
        description="SQLAlchemy URL of the store holding invoice sequence counters"
    )

    # Invoice numbering
    invoice_prefix: str = Field(
        default="INVC",
        min_length=1,
        description="Prefix of generated invoice numbers (PREFIX-YYYYMMDD-NNN)"
    )
    sequence_retention_days: int = Field(
        default=30,
        ge=1,
        description="Daily sequence counters older than this are purged"
    )

    # Tax
    default_ppn_rate: Decimal = Field(
        default=Decimal("11"),
        ge=0,
        le=100,
        description="PPN percentage applied to newly created invoices"
    )

    # Server
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level"
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Origins allowed to call the API when debug is off"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once at startup and cached for subsequent calls.
    This ensures consistent configuration across the application lifecycle.
    """
    return Settings()
