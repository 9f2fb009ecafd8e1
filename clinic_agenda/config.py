"""
Application Configuration
Centralized, validated settings for the agenda service.

Uses Pydantic Settings; values come from the environment or a local .env.
"""
import logging
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from clinic_agenda.i18n import MESSAGES
from clinic_agenda.utils.time_grid import is_day_iso

logger = logging.getLogger(__name__)

# Anchor used when a request carries no usable day
FALLBACK_DAY_ISO = "2025-12-11"

# Monday through Saturday
WEEK_DAYS = 6


class AgendaSettings(BaseSettings):
    """Validated environment configuration."""

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Level for the schedule engine loggers; unset follows LOG_LEVEL
    AGENDA_ENGINE_LOG_LEVEL: Optional[str] = None

    # Anchor day when the request has none (YYYY-MM-DD)
    AGENDA_DEFAULT_DAY: str = FALLBACK_DAY_ISO

    # Language for rationale, titles and insights
    AGENDA_LANGUAGE: str = "es"

    # Product name used in the weekly summary
    AGENDA_SUMMARY_NAME: str = "Fyllio"

    @field_validator('AGENDA_DEFAULT_DAY')
    @classmethod
    def validate_default_day(cls, v: str) -> str:
        if not is_day_iso(v):
            raise ValueError("AGENDA_DEFAULT_DAY must be a YYYY-MM-DD date")
        return v

    @field_validator('AGENDA_LANGUAGE')
    @classmethod
    def validate_language(cls, v: str) -> str:
        if v not in MESSAGES:
            raise ValueError(f"AGENDA_LANGUAGE must be one of {sorted(MESSAGES)}")
        return v

    @field_validator('LOG_LEVEL', 'AGENDA_ENGINE_LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log levels must be standard logging level names")
        return level

    @property
    def log_level(self) -> int:
        return getattr(logging, self.LOG_LEVEL)

    @property
    def engine_log_level(self) -> int:
        return getattr(logging, self.AGENDA_ENGINE_LOG_LEVEL or self.LOG_LEVEL)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # Allow extra env vars without validation errors
    }


def validate_environment() -> bool:
    """
    Validate environment configuration at startup.
    Returns True if valid, logs errors and returns False otherwise.
    """
    try:
        AgendaSettings()
        logger.info("Environment validation passed")
        return True
    except ValidationError as e:
        logger.error(f"Startup validation failed: {e}")
        return False


# Singleton settings instance for use throughout the app
_settings: Optional[AgendaSettings] = None


def get_settings() -> AgendaSettings:
    """Get validated settings singleton."""
    global _settings
    if _settings is None:
        _settings = AgendaSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (tests change the environment)."""
    global _settings
    _settings = None
