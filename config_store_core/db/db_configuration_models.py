"""
Configuration record model.

A record is either owner-scoped (``owner`` set) or a default (``owner`` is
NULL). Uniqueness is enforced by two partial unique indexes because a plain
unique constraint over ``(key, owner)`` treats every NULL owner as distinct.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, text

from ..constants import Limits
from .db_base import JSON, UUIDMixin, utc_now
from .db_config import Base


class ConfigurationRecord(Base, UUIDMixin):
    """Key/value record with provenance."""

    __tablename__ = "configurations"

    key = Column(String(Limits.MAX_KEY_LENGTH), nullable=False)
    owner = Column(String(Limits.MAX_OWNER_LENGTH), nullable=True, index=True)
    value = Column(JSON, nullable=False)

    # 1 on insert, incremented by every update
    version = Column(Integer, nullable=False, default=1)

    # Provenance
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    created_by = Column(String(Limits.MAX_ACTOR_LENGTH), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_by = Column(String(Limits.MAX_ACTOR_LENGTH), nullable=False)

    __table_args__ = (
        Index(
            "uq_configuration_key_owner",
            "key",
            "owner",
            unique=True,
            sqlite_where=text("owner IS NOT NULL"),
            postgresql_where=text("owner IS NOT NULL"),
        ),
        Index(
            "uq_configuration_default_key",
            "key",
            unique=True,
            sqlite_where=text("owner IS NULL"),
            postgresql_where=text("owner IS NULL"),
        ),
    )
