"""Configuration management for the compat engine.

This module handles environment-based configuration using Pydantic Settings.
Every field can be overridden with a ``REGCOMPAT_`` prefixed environment
variable, e.g. ``REGCOMPAT_LOG_LEVEL=DEBUG``.
"""

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RUNTIME_NAME = "julia"

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class CompatConfig(BaseSettings):
    """Compat engine configuration."""

    model_config = SettingsConfigDict(env_prefix="REGCOMPAT_", case_sensitive=False)

    # Environment
    environment: Literal["development", "testing", "production"] = Field(
        default="development", description="Application environment"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Log level")
    json_logs: bool = Field(default=False, description="Enable JSON formatted logs")

    # Compression behaviour
    runtime_name: str = Field(
        default=DEFAULT_RUNTIME_NAME,
        description="Reserved entry name for the host-runtime version constraint",
    )
    strict_decode: bool = Field(
        default=True,
        description=(
            "Reject existing documents that define a dependency twice for one "
            "version instead of repairing them"
        ),
    )

    @field_validator("runtime_name")
    @classmethod
    def _check_runtime_name(cls, value: str) -> str:
        if not _NAME_PATTERN.match(value):
            raise ValueError(f"Invalid runtime entry name: {value!r}")
        return value

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


def is_valid_entry_name(name: str) -> bool:
    """Check whether a dependency or runtime name may appear in a document."""
    return isinstance(name, str) and bool(_NAME_PATTERN.match(name))
