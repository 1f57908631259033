"""Library configuration using Pydantic Settings.

Settings are loaded from environment variables prefixed with ``FILTERCTL_``.

Optionally, you may point ``ENV_FILE`` at a local env file (for development).
Every public function that takes one of these values as an optional parameter
falls back to the module-level ``settings`` instance.
"""

import os
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    filterctl settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="FILTERCTL_", extra="ignore"
    )

    # Environment
    app_env: AppEnvironment = AppEnvironment.LOCAL
    log_level: str = "INFO"

    # Observability
    structured_logs: bool = True
    metrics_enabled: bool = True

    # Compiler
    # There's no documented limit on Gmail filter size: 20 units is an
    # educated guess that can be overridden per platform.
    filter_size_limit: int = Field(default=20, ge=1)
    simplify_max_passes: int = Field(default=4, ge=1)

    # Reporting
    diff_context_lines: int = Field(default=3, ge=0)
    test_diff_context_lines: int = Field(default=5, ge=0)

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(_LOG_LEVELS)}, got '{v}'")
        return level


settings = Settings()
