from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from redcap_client.api.connection import (
    DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS,
    DEFAULT_TIMEOUT_IN_SECONDS,
)
from redcap_client.errors import RedcapClientError
from redcap_client.validation import validate_api_token, validate_super_token


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # REDCap API
    REDCAP_API_URL: Optional[str] = Field(default=None, description="REDCap API URL")
    REDCAP_API_TOKEN: Optional[str] = Field(default=None, description="32-character project token")
    REDCAP_SUPER_TOKEN: Optional[str] = Field(default=None, description="64-character super token")
    REDCAP_SSL_VERIFY: bool = True
    REDCAP_CA_CERTIFICATE_FILE: Optional[str] = None
    REDCAP_TIMEOUT_SECONDS: int = DEFAULT_TIMEOUT_IN_SECONDS
    REDCAP_CONNECTION_TIMEOUT_SECONDS: int = DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS
    REDCAP_BATCH_SIZE: int = 500

    # Retry
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_DELAY_SECONDS: float = 2.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Optional path to a YAML config that can override/extend env
    CONFIG_YAML: Optional[str] = Field(default="config/settings.yaml")

    @field_validator("REDCAP_API_TOKEN")
    @classmethod
    def _check_api_token(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            return validate_api_token(value.strip())
        except RedcapClientError as e:
            raise ValueError(e.message) from e

    @field_validator("REDCAP_SUPER_TOKEN")
    @classmethod
    def _check_super_token(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            return validate_super_token(value.strip())
        except RedcapClientError as e:
            raise ValueError(e.message) from e

    @field_validator(
        "REDCAP_TIMEOUT_SECONDS",
        "REDCAP_CONNECTION_TIMEOUT_SECONDS",
        "REDCAP_BATCH_SIZE",
        "RETRY_MAX_ATTEMPTS",
    )
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("RETRY_DELAY_SECONDS")
    @classmethod
    def _check_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level {value!r}")
        return level


def load_settings() -> Settings:
    """Load Settings from env (.env) and optionally merge a YAML file for overrides.

    Values set explicitly in the environment take precedence over YAML values.
    """
    base = Settings()  # loads from env/.env

    yaml_path = base.CONFIG_YAML
    if yaml_path and Path(yaml_path).exists():
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, dict):
            data = {str(key).upper(): value for key, value in data.items()}
            explicit = base.model_dump(include=base.model_fields_set)
            return Settings(**{**data, **explicit})

    return base


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the cached settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> Settings:
    global _settings
    _settings = load_settings()
    return _settings
