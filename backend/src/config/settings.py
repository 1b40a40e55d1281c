"""
Application settings configuration for the crisis line scheduling backend.

Centralized settings loaded from environment variables.
"""

from datetime import time
from functools import lru_cache
from typing import List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        CRISISLINE_TIMEZONE: IANA timezone the helpline operates in (default: Europe/Lisbon)
        CRISISLINE_SHIFT_WINDOWS: Comma-separated HH:MM-HH:MM clock windows generated
            for every accepted day of a recurring schedule
            (default: "20:00-22:30,22:30-01:00"). A window ending at or before
            its start time ends on the next calendar day.
        CRISISLINE_BATCH_WRITE_LIMIT: Maximum rows written per transaction when
            generating recurring events (default: 400)
        CRISISLINE_MAX_RECURRENCE_DAYS: Longest date range, in days, a single
            recurring generation may cover (default: 731)
        CRISISLINE_CORS_ORIGINS: Comma-separated origins allowed by CORS
    """

    timezone: str = Field(
        default="Europe/Lisbon",
        validation_alias="CRISISLINE_TIMEZONE",
        description="IANA timezone used to turn shift clock times into instants"
    )

    shift_windows: str = Field(
        default="20:00-22:30,22:30-01:00",
        validation_alias="CRISISLINE_SHIFT_WINDOWS",
        description="Daily shift windows as HH:MM-HH:MM, comma separated"
    )

    batch_write_limit: int = Field(
        default=400,
        validation_alias="CRISISLINE_BATCH_WRITE_LIMIT",
        ge=1,
        le=500,
    )

    max_recurrence_days: int = Field(
        default=731,
        validation_alias="CRISISLINE_MAX_RECURRENCE_DAYS",
        ge=1,
        le=3660,
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="CRISISLINE_CORS_ORIGINS",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject unknown IANA timezone names at startup."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("shift_windows")
    @classmethod
    def validate_shift_windows(cls, v: str) -> str:
        """Ensure every window parses as HH:MM-HH:MM."""
        windows = _parse_windows(v)
        if not windows:
            raise ValueError("CRISISLINE_SHIFT_WINDOWS must define at least one window")
        return v

    @property
    def shift_window_times(self) -> List[Tuple[time, time]]:
        """
        Get the configured shift windows as clock time pairs.

        Returns:
            List of (start, end) tuples in configuration order
        """
        return _parse_windows(self.shift_windows)

    @property
    def cors_origins_list(self) -> List[str]:
        """Get the list of allowed CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def _parse_windows(value: str) -> List[Tuple[time, time]]:
    windows = []
    for chunk in value.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            start_str, end_str = chunk.split("-")
            windows.append((time.fromisoformat(start_str.strip()), time.fromisoformat(end_str.strip())))
        except ValueError:
            raise ValueError(f"Invalid shift window '{chunk}', expected HH:MM-HH:MM")
    return windows


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
