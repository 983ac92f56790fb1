"""Configuration module - public API.

Centralized configuration for routelog using Pydantic BaseSettings.

Exports:
    settings: Singleton LoggingSettings instance
    LoggingSettings: Settings class (for testing/overrides)

Example:
    ```python
    from routelog.configuration import settings

    if settings.LOG_DEV:
        # Development-specific logic...
    ```
"""

from routelog.configuration.settings import LoggingSettings, settings

__all__ = ["LoggingSettings", "settings"]
