"""
Configuration Management

This module provides configuration settings for the wallboard stats poller
using Pydantic Settings.

Settings are read from an optional JSON config file (camelCase keys, the
format operators already keep next to the poller), then from environment
variables and the .env file.

Author: WallStats Team
Date: 2026-10-19
"""

import json
from typing import List, Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wallstats.common.errors import ConfigError


# PureCloud does not return service levels for granularities below 30 minutes
SUPPORTED_GRANULARITIES = ("PT30M", "PT60M", "PT1H")

SUPPORTED_MEDIA_TYPES = ("voice", "chat", "email")


class Settings(BaseSettings):
    """
    Application configuration settings.

    Every field accepts its snake_case name (also used for environment
    variables) or the camelCase key used in JSON config files.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # PureCloud credentials
    pure_cloud_region: str = Field(
        "mypurecloud.com",
        validation_alias=AliasChoices("pure_cloud_region", "pureCloudRegion"),
    )
    pure_cloud_client_id: str = Field(
        validation_alias=AliasChoices("pure_cloud_client_id", "pureCloudClientId"),
    )
    pure_cloud_client_secret: str = Field(
        validation_alias=AliasChoices("pure_cloud_client_secret", "pureCloudClientSecret"),
    )

    # Polling configuration
    granularity: str = Field(
        "PT30M",
        validation_alias=AliasChoices("granularity"),
    )
    poll_frequency_seconds: float = Field(
        10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("poll_frequency_seconds", "pollFrequencySeconds"),
    )
    queues: List[str] = Field(
        min_length=1,
        validation_alias=AliasChoices("queues"),
    )

    # Database configuration
    database_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("database_url", "databaseUrl"),
    )

    # Provider and runtime tuning
    max_filter_predicates: int = Field(
        100,
        ge=1,
        validation_alias=AliasChoices("max_filter_predicates", "maxFilterPredicates"),
    )
    http_timeout_seconds: float = Field(
        30.0,
        gt=0,
        validation_alias=AliasChoices("http_timeout_seconds", "httpTimeoutSeconds"),
    )
    metrics_port: int = Field(
        0,
        validation_alias=AliasChoices("metrics_port", "metricsPort"),
    )  # Prometheus metrics port (if >0 then enabled)
    log_level: str = Field(
        "INFO",
        validation_alias=AliasChoices("log_level", "logLevel"),
    )

    @field_validator("granularity")
    @classmethod
    def _check_granularity(cls, value: str) -> str:
        if value not in SUPPORTED_GRANULARITIES:
            raise ValueError("Invalid granularity. Use PT30M, PT60M or PT1H")
        return value

    @field_validator("queues")
    @classmethod
    def _check_queues(cls, value: List[str]) -> List[str]:
        cleaned = [queue_id.strip() for queue_id in value]
        if any(not queue_id for queue_id in cleaned):
            raise ValueError("Queue IDs must not be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Queue IDs must be unique")
        return cleaned


def load_settings(config_file: Optional[str] = None) -> Settings:
    """
    Load and validate settings.

    Args:
        config_file: Optional path to a JSON config file. Values found in
            the file take priority over environment variables.

    Returns:
        Settings: Validated settings

    Raises:
        ConfigError: If the file cannot be read or a value is invalid
    """
    overrides = {}
    if config_file:
        try:
            with open(config_file, "r", encoding="utf-8") as fh:
                overrides = json.load(fh)
        except (OSError, json.JSONDecodeError) as ex:
            raise ConfigError(f"Cannot read config file {config_file}: {ex}") from ex
        if not isinstance(overrides, dict):
            raise ConfigError(f"Config file {config_file} must hold a JSON object")

    try:
        return Settings(**overrides)
    except ValidationError as ex:
        raise ConfigError(f"Invalid configuration: {ex}") from ex


# Global settings instance (initialized lazily)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(value: Settings) -> None:
    """Install settings loaded elsewhere (e.g. from a config file) as the process-wide instance."""
    global _settings
    _settings = value
