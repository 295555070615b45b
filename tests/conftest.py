"""
Test fixtures for the configuration store.

SQLite in-memory database shared for the session, fresh tables for every
test, and services wired with a fixed signing key and the cheapest bcrypt
cost so tests stay fast.
"""

import pytest
from sqlalchemy.orm import Session

from config_store_core.config import DatabaseConfig, StoreConfig
from config_store_core.context.request_context import RequestContext
from config_store_core.db import DatabaseManager, initialize_db
from config_store_core.db.db_config import Base
from config_store_core.enums import TokenRole
from config_store_core.exceptions import clear_correlation_id
from config_store_core.services import AuthorizationGate, ConfigurationService, TokenService
from tests.fixtures.factories import (
    AccessTokenFactory,
    ConfigurationRecordFactory,
    DefaultConfigurationFactory,
)

TEST_SIGNING_KEY = "test-signing-key-0123456789abcdef"
TEST_HASH_ROUNDS = 4


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(url="sqlite:///:memory:", echo=False, development_mode=True)


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    manager = initialize_db(db_config)
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty store.
    """
    session = db_manager.get_session()
    Base.metadata.create_all(db_manager.engine)

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(scope="function")
def factory_session(db_session: Session) -> Session:
    """Bind the factory_boy factories to the test session."""
    for factory_class in (AccessTokenFactory, ConfigurationRecordFactory, DefaultConfigurationFactory):
        factory_class._meta.sqlalchemy_session = db_session
    return db_session


@pytest.fixture(autouse=True)
def clean_request_state():
    """Never leak identity or correlation ids between tests."""
    yield
    RequestContext.clear()
    clear_correlation_id()


@pytest.fixture
def signing_key() -> str:
    return TEST_SIGNING_KEY


@pytest.fixture
def token_service(db_session: Session, signing_key: str) -> TokenService:
    return TokenService(db_session, signing_key=signing_key, hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig()


@pytest.fixture
def configuration_service(db_session: Session, store_config: StoreConfig) -> ConfigurationService:
    return ConfigurationService(db_session, store_config)


@pytest.fixture
def gate(token_service: TokenService, configuration_service: ConfigurationService) -> AuthorizationGate:
    return AuthorizationGate(token_service, configuration_service)


@pytest.fixture
def regular_token(token_service: TokenService):
    """Issued regular token (IssuedToken)."""
    return token_service.issue("regular-user")


@pytest.fixture
def admin_token(token_service: TokenService):
    """Issued admin token (IssuedToken)."""
    return token_service.issue("admin-user", TokenRole.ADMIN)
