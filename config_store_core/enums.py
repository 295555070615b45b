"""
Enums used across the config_store_core package.

Kept apart from the modules that use them to avoid circular imports.
"""

import enum


class TokenRole(str, enum.Enum):
    """Privilege level requested when a token is issued."""

    REGULAR = "regular"
    ADMIN = "admin"


class AccessPolicy(str, enum.Enum):
    """What a gated operation demands from the presented bearer token."""

    NONE = "none"
    ANY_VALID_TOKEN = "any-valid-token"
    ADMIN_TOKEN = "admin-token"
