"""
Engine and session wiring for the configuration store.

Connection settings come from ``AppConfig.database``. Callers own the
manager: services receive sessions from it and never look one up globally.
"""

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker

from ..config import DatabaseConfig, get_config
from ..exceptions import configuration_error
from ..utils import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()


class DatabaseManager:
    """Engine plus a thread-scoped session registry for one database URL."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self):
        if self.config.is_sqlite:
            # Sessions may be handed to worker threads
            return create_engine(
                self.config.url,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
            )
        return create_engine(
            self.config.url,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.config.development_mode:
            raise configuration_error(
                "development_mode", "Cannot drop tables: not in development mode"
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self, session: Optional[Session] = None) -> None:
        if session:
            session.close()
        else:
            self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def import_all_models():
    """Import all models to ensure they're registered with SQLAlchemy metadata."""
    from sqlalchemy.orm import configure_mappers

    from .db_configuration_models import ConfigurationRecord  # noqa
    from .db_token_models import AccessToken  # noqa

    configure_mappers()


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Build a DatabaseManager and create any missing tables.

    Args:
        config: Connection settings. Defaults to ``get_config().database``.
    """
    config = config or get_config().database

    manager = DatabaseManager(config)
    get_logger().info("Initializing database", extra={"dialect": manager.dialect_name})

    import_all_models()
    manager.create_tables()
    return manager
