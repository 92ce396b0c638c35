"""Configuration settings for the workout tracker."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.entities import DEFAULT_REST_TIME
from .models.enums import WeightUnit


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field can be overridden with a ``WORKOUT_TRACKER_`` prefixed
    variable, e.g. ``WORKOUT_TRACKER_WEIGHT_UNIT=lb``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKOUT_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_path: Path = Path("workout_tracker.db")

    # User preferences
    weight_unit: WeightUnit = WeightUnit.KILOGRAMS
    default_rest_time: int = Field(default=DEFAULT_REST_TIME, ge=0, le=3600)

    # Logging
    log_level: str = "INFO"


class UserPreferences(BaseModel):
    """The preferences the core reads: display unit and default rest time.

    Passed explicitly to the repositories and engines that need it.
    """

    model_config = ConfigDict(frozen=True)

    weight_unit: WeightUnit = WeightUnit.KILOGRAMS
    default_rest_time: int = Field(default=DEFAULT_REST_TIME, ge=0, le=3600)

    @classmethod
    def from_settings(cls, settings: Settings) -> "UserPreferences":
        return cls(
            weight_unit=settings.weight_unit,
            default_rest_time=settings.default_rest_time,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
