"""
Pydantic schemas for access tokens.

None of these models carry the secret hash. The plaintext secret only ever
appears inside ``IssuedToken.bearer_token``.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import KEY_CHARSET_DESCRIPTION, KEY_PATTERN, Limits
from ..enums import TokenRole


class TokenCreate(BaseModel):
    """Parameters accepted when issuing a token."""

    model_config = ConfigDict(extra="forbid")

    display_name: str = Field(
        ...,
        min_length=Limits.MIN_DISPLAY_NAME_LENGTH,
        max_length=Limits.MAX_DISPLAY_NAME_LENGTH,
        description="Human label bound into the tamper seal",
    )
    role: TokenRole = Field(default=TokenRole.REGULAR, description="Requested privilege level")
    expires_in_days: Optional[int] = Field(
        None, gt=0, le=Limits.MAX_TOKEN_LIFETIME_DAYS, description="Lifetime in days; None never expires"
    )

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v):
        """Validate the name uses the key character set."""
        if not re.fullmatch(KEY_PATTERN, v):
            raise ValueError(f"Name can only contain {KEY_CHARSET_DESCRIPTION}")
        return v


class TokenRead(BaseModel):
    """Operator view of a persisted token."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    is_admin: bool
    revoked: bool
    revoked_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class IssuedToken(BaseModel):
    """Result of issuance. ``bearer_token`` is shown once and cannot be recovered."""

    bearer_token: str = Field(..., repr=False)
    token: TokenRead


class AuthContext(BaseModel):
    """Identity established by a successful verification."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    display_name: str
    is_admin: bool
