"""Application configuration using Pydantic Settings."""

import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Persistence boundary
    database_url: str = "sqlite+aiosqlite:///./glucos.db"
    persistence_enabled: bool = True
    autosave_interval_seconds: int = Field(default=30, gt=0)

    # Logging
    log_format: str = "json"  # 'json' or 'text'
    log_level: str = "INFO"
    service_name: str = "glucos-monitor"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Event store retention bounds (FIFO eviction per stream)
    glucose_retention_limit: int = Field(default=1000, gt=0)
    meal_retention_limit: int = Field(default=1000, gt=0)
    medication_retention_limit: int = Field(default=1000, gt=0)

    # Age-based pruning of old events
    data_retention_enabled: bool = True
    data_retention_days: int = Field(default=30, gt=0)
    data_retention_check_interval_hours: int = Field(default=24, gt=0)

    # Reading generator
    generator_interval_minutes: int = Field(default=5, gt=0)
    generator_autostart: bool = False
    generator_initial_bgl: float = Field(default=120.0, ge=40, le=400)
    patient_timezone: str = "UTC"

    # Patient profile (passed through as context only)
    patient_name: str = "Patient"
    target_bgl: float = 120.0
    insulin_to_carb_ratio: str = "1:10"
    insulin_sensitivity_factor: float = 50.0
    basal_rate: float = 1.0

    # Notification sink
    notification_webhook_url: str = ""
    notification_timeout_seconds: float = 10.0

    # Testing
    testing: bool = False  # Set to True during tests to disable background jobs


settings = Settings()


def validate_timezone() -> None:
    """Validate that the configured patient time zone is known.

    Time-of-day drift in the reading generator depends on it, so an
    unknown zone is fatal at startup rather than silently falling back.
    """
    try:
        ZoneInfo(settings.patient_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        print(
            f"FATAL: PATIENT_TIMEZONE '{settings.patient_timezone}' is not a "
            "known IANA time zone (e.g. 'UTC', 'Europe/London').",
            file=sys.stderr,
        )
        sys.exit(1)
