"""
Constants for the configuration store.

This module centralizes magic strings and limits used throughout the
package to ensure consistency and maintainability.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    DATABASE_URL = "DATABASE_URL"
    DB_ECHO = "DB_ECHO"
    APP_ENV = "APP_ENV"
    APP_SECRET = "APP_SECRET"
    BCRYPT_ROUNDS = "BCRYPT_ROUNDS"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"


# Characters allowed in configuration keys, owners and token names
KEY_PATTERN = r"^[A-Za-z0-9@_/\\|&.:#$\[\]{}()-]+$"
KEY_CHARSET_DESCRIPTION = (
    "alphanumeric characters and the following special characters: "
    "@ _ - / \\ | & . : # $ [ ] { } ( )"
)

ANONYMOUS_ACTOR = "anonymous"
BEARER_PREFIX = "Bearer "


class Limits:
    """System limits and thresholds."""

    MIN_KEY_LENGTH = 1
    MAX_KEY_LENGTH = 200
    MIN_OWNER_LENGTH = 1
    MAX_OWNER_LENGTH = 200
    MIN_DISPLAY_NAME_LENGTH = 3
    MAX_DISPLAY_NAME_LENGTH = 30
    MAX_ACTOR_LENGTH = 100
    MAX_VALUE_LENGTH = 10000
    MAX_PAGE_SIZE = 1000
    SECRET_BYTES = 32
    DEFAULT_HASH_ROUNDS = 10
    MIN_HASH_ROUNDS = 4
    MAX_HASH_ROUNDS = 31
    MAX_ISSUE_ATTEMPTS = 3
    MAX_TOKEN_LIFETIME_DAYS = 36500
