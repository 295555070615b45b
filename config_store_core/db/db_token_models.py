"""
Access token model.

Just the data structure. Issuance and verification live in
services/token_service.py.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String

from ..constants import Limits
from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class AccessToken(Base, UUIDMixin, TimestampMixin):
    """Persisted half of a bearer credential. The plaintext secret is never stored."""

    __tablename__ = "access_tokens"

    # Core fields
    secret_hash = Column(String(100), nullable=False)
    display_name = Column(String(Limits.MAX_DISPLAY_NAME_LENGTH), nullable=False, index=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    # Lifecycle
    revoked = Column(Boolean, nullable=False, default=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_access_token_active", "revoked", "expires_at"),)
