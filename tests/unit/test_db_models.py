"""
Tests for the database layer: models, column types and DatabaseManager.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from config_store_core.config import AppConfig, DatabaseConfig, reset_config, set_config
from config_store_core.db import AccessToken, ConfigurationRecord, DatabaseManager, initialize_db
from config_store_core.db.db_base import as_utc, utc_now
from config_store_core.exceptions import ConfigStoreError, ErrorCode


def make_record(key="theme", owner="alice", value="dark"):
    return ConfigurationRecord(
        key=key, owner=owner, value=value, created_by="test", updated_by="test"
    )


class TestConfigurationRecord:
    """Test ConfigurationRecord persistence and uniqueness."""

    def test_defaults_applied(self, db_session):
        record = make_record()
        db_session.add(record)
        db_session.commit()

        assert record.id is not None
        assert record.version == 1
        assert record.created_at is not None

    def test_json_value_round_trip(self, db_session):
        value = {"nested": {"list": [1, 2.5, "x", None, True]}, "unicode": "héllo"}
        db_session.add(make_record(value=value))
        db_session.commit()
        db_session.expire_all()

        assert db_session.query(ConfigurationRecord).one().value == value

    def test_duplicate_owner_key_rejected(self, db_session):
        db_session.add(make_record())
        db_session.commit()

        db_session.add(make_record(value="light"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_duplicate_default_key_rejected(self, db_session):
        db_session.add(make_record(owner=None))
        db_session.commit()

        db_session.add(make_record(owner=None, value="light"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_default_and_owner_records_coexist(self, db_session):
        db_session.add_all([make_record(owner=None), make_record(owner="alice"), make_record(owner="bob")])
        db_session.commit()

        assert db_session.query(ConfigurationRecord).count() == 3


class TestAccessToken:
    """Test AccessToken persistence."""

    def test_defaults_applied(self, db_session):
        token = AccessToken(secret_hash="$2b$04$hash", display_name="reporting")
        db_session.add(token)
        db_session.commit()

        assert len(token.id) == 36
        assert token.is_admin is False
        assert token.revoked is False
        assert token.revoked_at is None
        assert token.expires_at is None


class TestTimeHelpers:
    """Test utc_now/as_utc."""

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None

    def test_as_utc_attaches_zone_to_naive(self):
        naive = datetime(2024, 1, 1, 12, 0)

        assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_as_utc_keeps_aware(self):
        aware = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert as_utc(aware) is aware


class TestDatabaseConfig:
    """Test DatabaseConfig settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("DB_ECHO", raising=False)

        config = DatabaseConfig()

        assert config.url == "sqlite:///./config_store.db"
        assert config.echo is False
        assert config.development_mode is False
        assert config.is_sqlite is True

    def test_url_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://svc:pw@db:5432/config_store")

        config = AppConfig().database

        assert config.url == "postgresql://svc:pw@db:5432/config_store"
        assert config.is_sqlite is False

    def test_echo_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_ECHO", "true")

        assert DatabaseConfig().echo is True

    def test_repr_hides_url(self):
        config = DatabaseConfig(url="postgresql://svc:hunter2@db/config_store")

        assert "hunter2" not in repr(config)


class TestDatabaseManager:
    """Test engine wiring and table lifecycle."""

    def test_drop_tables_outside_development_mode(self):
        manager = DatabaseManager(DatabaseConfig(url="sqlite:///:memory:"))
        try:
            with pytest.raises(ConfigStoreError) as exc_info:
                manager.drop_tables()
            assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
        finally:
            manager.close()

    def test_initialize_creates_tables(self):
        manager = initialize_db(DatabaseConfig(url="sqlite:///:memory:", development_mode=True))
        try:
            session = manager.get_session()
            session.add(make_record())
            session.commit()

            assert manager.dialect_name == "sqlite"
            assert session.query(ConfigurationRecord).count() == 1
        finally:
            manager.close()

    def test_initialize_uses_app_config(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        set_config(AppConfig())
        try:
            manager = initialize_db()
            try:
                assert str(manager.engine.url) == "sqlite:///:memory:"
            finally:
                manager.close()
        finally:
            reset_config()
