"""Logging settings for the routed logging system."""

from datetime import timedelta
from typing import Literal, Optional

from pydantic import Field, field_validator

from routelog.configuration.base import RouteLogSettings
from routelog.logging.caller import DEFAULT_CALLER_SKIP
from routelog.logging.levels import Level


class LoggingSettings(RouteLogSettings):
    """Logging configuration read from the environment.

    Environment Variables:
        LOG_LEVEL: Minimum level passed to the root logger (default: INFO)
        LOG_DEV: Use the colorized development formatter (default: False)
        LOG_FORMAT: Formatter for non-dev output, 'text' or 'json' (default: text)
        LOG_PATH: Base path of the rotating log file; stdout when unset
        LOG_SPLIT_LEVELS: One rotating file per level at LOG_PATH.<level> (default: False)
        LOG_STDOUT: Also copy rotating file output to stdout (default: False)
        LOG_MAX_AGE_HOURS: Retention window of rotated files (default: 168 = 7 days)
        LOG_ROTATION_HOURS: Rotation period of log files (default: 24)
        LOG_CALLER_SKIP: Stack depth where caller resolution starts (default: 4)

    Example:
        ```python
        from routelog.configuration import settings

        if settings.LOG_PATH:
            files = new_rotate_file_map(settings.LOG_PATH, settings.max_age, settings.rotation)
        ```
    """

    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")
    LOG_DEV: bool = Field(default=False, alias="LOG_DEV")
    LOG_FORMAT: Literal["text", "json"] = Field(default="text", alias="LOG_FORMAT")
    LOG_PATH: Optional[str] = Field(default=None, alias="LOG_PATH")
    LOG_SPLIT_LEVELS: bool = Field(default=False, alias="LOG_SPLIT_LEVELS")
    LOG_STDOUT: bool = Field(default=False, alias="LOG_STDOUT")
    LOG_MAX_AGE_HOURS: int = Field(default=7 * 24, alias="LOG_MAX_AGE_HOURS", gt=0)
    LOG_ROTATION_HOURS: int = Field(default=24, alias="LOG_ROTATION_HOURS", gt=0)
    LOG_CALLER_SKIP: int = Field(default=DEFAULT_CALLER_SKIP, alias="LOG_CALLER_SKIP", ge=0)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Reject unknown level names early."""
        Level.parse(v)
        return v.upper()

    @property
    def level(self) -> Level:
        return Level.parse(self.LOG_LEVEL)

    @property
    def max_age(self) -> timedelta:
        return timedelta(hours=self.LOG_MAX_AGE_HOURS)

    @property
    def rotation(self) -> timedelta:
        return timedelta(hours=self.LOG_ROTATION_HOURS)


# Create the singleton settings instance
settings = LoggingSettings()
