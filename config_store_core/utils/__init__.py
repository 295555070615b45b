"""Utility modules for the configuration store."""

# Bearer string encoding
from .bearer_utils import (
    BearerToken,
    build_bearer_token,
    canonical_payload,
    parse_bearer_token,
    unseal_bearer_token,
)

# JSON helpers
from .json_utils import dumps_compact, serialized_length

# Logging
from .logger import ContextAwareLogger, configure_logging, get_logger, reset_logging

# Tamper seal
from .seal_utils import TamperSeal

# Secret generation and hashing
from .secret_utils import SecretHasher, generate_secret

# Input shaping
from .validation_utils import normalize_keys

__all__ = [
    # Bearer strings
    "BearerToken",
    "build_bearer_token",
    "canonical_payload",
    "parse_bearer_token",
    "unseal_bearer_token",
    # JSON
    "dumps_compact",
    "serialized_length",
    # Logging
    "ContextAwareLogger",
    "configure_logging",
    "get_logger",
    "reset_logging",
    # Crypto
    "TamperSeal",
    "SecretHasher",
    "generate_secret",
    # Validation
    "normalize_keys",
]
