"""Configuration for the trigger engine.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EngineSettings(BaseSettings):
    """Settings for the trigger engine.

    Environment variables:
    - LOG_LEVEL                              (optional)
    - TRIGGER_ENGINE_CATALOG_PATH            (optional)
    - TRIGGER_ENGINE_UNKNOWN_AS_WEBHOOK      (optional)
    - TRIGGER_ENGINE_STOP_AT_FIRST_MISSING   (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `EngineSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    catalog_path: Path | None = Field(
        default=None,
        validation_alias="TRIGGER_ENGINE_CATALOG_PATH",
        description="JSON file with extra trigger descriptors, loaded on top of the built-ins",
    )

    unknown_as_webhook: bool = Field(
        default=False,
        validation_alias="TRIGGER_ENGINE_UNKNOWN_AS_WEBHOOK",
        description="Treat unrecognized trigger keys as generic webhooks instead of 'unknown'",
    )

    stop_at_first_missing: bool = Field(
        default=True,
        validation_alias="TRIGGER_ENGINE_STOP_AT_FIRST_MISSING",
        description="Report only the first missing required config field",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_values(self) -> EngineSettings:
        if self.log_level.strip().upper() not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        if self.catalog_path is not None and not self.catalog_path.is_file():
            raise ValueError(f"TRIGGER_ENGINE_CATALOG_PATH does not exist: {self.catalog_path}")
        return self
