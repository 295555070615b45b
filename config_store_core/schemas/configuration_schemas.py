"""
Pydantic schemas for configuration records.

Keys and owners share one character set. The key length and value size
limits can be tightened per store: services pass their StoreConfig limits
as the validation context, and the built-in Limits apply without one.
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..constants import ANONYMOUS_ACTOR, KEY_CHARSET_DESCRIPTION, KEY_PATTERN, Limits
from ..utils.json_utils import serialized_length

_KEY_RE = re.compile(KEY_PATTERN)


def _context_limit(info: ValidationInfo, name: str, default: int) -> int:
    return (info.context or {}).get(name, default)


def _check_identifier(label: str, v: str, max_length: int) -> str:
    if len(v) > max_length:
        raise ValueError(f"{label} must not exceed {max_length} characters")
    if not _KEY_RE.fullmatch(v):
        raise ValueError(f"{label} can only contain {KEY_CHARSET_DESCRIPTION}")
    return v


def _check_key(v: str, info: ValidationInfo) -> str:
    return _check_identifier(
        "Key", v, _context_limit(info, "max_key_length", Limits.MAX_KEY_LENGTH)
    )


class ConfigurationInput(BaseModel):
    """Validation shared by every schema that carries a key, owner or value."""

    model_config = ConfigDict(extra="forbid")

    @field_validator("key", check_fields=False)
    @classmethod
    def validate_key(cls, v, info: ValidationInfo):
        """Validate key length and character set."""
        return _check_key(v, info)

    @field_validator("owner", check_fields=False)
    @classmethod
    def validate_owner(cls, v):
        """Validate owner character set. None selects the default record."""
        if v is not None:
            _check_identifier("Owner", v, Limits.MAX_OWNER_LENGTH)
        return v

    @field_validator("value", check_fields=False)
    @classmethod
    def validate_value(cls, v, info: ValidationInfo):
        """Require plain, non-null JSON whose compact form fits the size limit."""
        if v is None:
            raise ValueError("Value is required")
        try:
            length = serialized_length(v)
        except (TypeError, ValueError):
            raise ValueError("Value must be valid JSON")
        max_length = _context_limit(info, "max_value_length", Limits.MAX_VALUE_LENGTH)
        if length > max_length:
            raise ValueError(f"Value must not exceed {max_length} characters when serialized")
        return v


class ConfigurationUpsert(ConfigurationInput):
    """A single write request. ``owner=None`` targets the default record."""

    key: str = Field(
        ..., min_length=Limits.MIN_KEY_LENGTH, max_length=Limits.MAX_KEY_LENGTH, description="Configuration key"
    )
    owner: Optional[str] = Field(
        None, min_length=Limits.MIN_OWNER_LENGTH, max_length=Limits.MAX_OWNER_LENGTH, description="Owner id"
    )
    value: Any = Field(..., description="Any JSON value except null")
    actor: str = Field(
        default=ANONYMOUS_ACTOR,
        min_length=1,
        max_length=Limits.MAX_ACTOR_LENGTH,
        description="Name recorded in created_by/updated_by",
    )


class DefaultConfiguration(ConfigurationInput):
    """One item of a bulk default seed."""

    key: str = Field(..., min_length=Limits.MIN_KEY_LENGTH, max_length=Limits.MAX_KEY_LENGTH)
    value: Any


class ConfigurationQuery(ConfigurationInput):
    """Owner and keys of a resolve call."""

    owner: Optional[str] = Field(
        None, min_length=Limits.MIN_OWNER_LENGTH, max_length=Limits.MAX_OWNER_LENGTH
    )
    keys: List[str] = Field(default_factory=list, description="Requested keys; empty reads the owner's records")

    @field_validator("keys")
    @classmethod
    def validate_keys(cls, v, info: ValidationInfo):
        """Validate each key and drop repeats, keeping first-seen order."""
        unique = list(dict.fromkeys(_check_key(key, info) for key in v))
        max_keys = _context_limit(info, "max_page_size", Limits.MAX_PAGE_SIZE)
        if len(unique) > max_keys:
            raise ValueError(f"At most {max_keys} keys can be resolved at once")
        return unique


class KeySelector(ConfigurationInput):
    """Every record of one key."""

    key: str = Field(..., min_length=Limits.MIN_KEY_LENGTH, max_length=Limits.MAX_KEY_LENGTH)


class OwnerSelector(ConfigurationInput):
    """Every record of one owner. Defaults have no owner and are never selected."""

    owner: str = Field(..., min_length=Limits.MIN_OWNER_LENGTH, max_length=Limits.MAX_OWNER_LENGTH)


class RecordSelector(ConfigurationInput):
    """A single ``(key, owner)`` record; ``owner=None`` selects the default."""

    key: str = Field(..., min_length=Limits.MIN_KEY_LENGTH, max_length=Limits.MAX_KEY_LENGTH)
    owner: Optional[str] = Field(
        None, min_length=Limits.MIN_OWNER_LENGTH, max_length=Limits.MAX_OWNER_LENGTH
    )


class ConfigurationRead(BaseModel):
    """Stored record with provenance."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    owner: Optional[str] = None
    value: Any
    created_at: datetime
    created_by: str
    updated_at: datetime
    updated_by: str

    @property
    def is_default(self) -> bool:
        return self.owner is None


class UpsertResult(BaseModel):
    """Outcome of an upsert: the record as stored and whether it was created."""

    record: ConfigurationRead
    upserted: bool = Field(..., description="True when the call inserted a new record")
