"""
Centralized configuration management for the configuration store.

This module provides a unified configuration system with support for:
- Environment variables
- Database connection URL
- Security settings (signing secret, hash cost)
- Store limits
- Validation using Pydantic
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, Limits, LogLevel


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./config_store.db"
        ),
        description="SQLAlchemy connection URL",
        repr=False,
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.DB_ECHO.value),
        description="Echo SQL statements",
    )
    development_mode: bool = Field(
        default=False, description="Allows destructive schema operations such as drop_tables"
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        validate_default=True,
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SecurityConfig(BaseModel):
    """Security-related configuration."""

    app_secret: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_SECRET.value) or None,
        description="Server-wide key used to seal bearer tokens",
        repr=False,
    )
    hash_rounds: int = Field(
        default_factory=lambda: _env_int(
            EnvironmentVariable.BCRYPT_ROUNDS.value, Limits.DEFAULT_HASH_ROUNDS
        ),
        ge=Limits.MIN_HASH_ROUNDS,
        le=Limits.MAX_HASH_ROUNDS,
        validate_default=True,
        description="bcrypt cost factor for token secrets",
    )


class StoreConfig(BaseModel):
    """Limits applied by the configuration store."""

    max_key_length: int = Field(default=Limits.MAX_KEY_LENGTH, gt=0, le=Limits.MAX_KEY_LENGTH)
    max_value_length: int = Field(
        default=Limits.MAX_VALUE_LENGTH,
        gt=0,
        description="Maximum length of the JSON-serialized value in characters",
    )
    max_page_size: int = Field(
        default=Limits.MAX_PAGE_SIZE,
        gt=0,
        description="Maximum number of records returned by a single resolve",
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.DEBUG.value),
        description="Debug mode",
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    store: StoreConfig = Field(default_factory=StoreConfig, description="Store limits")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
