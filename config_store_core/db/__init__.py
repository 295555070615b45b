"""
SQLAlchemy models and database wiring for the configuration store.
"""

# Import base definitions
from .db_base import JSON, TimestampMixin, UUIDMixin, as_utc, utc_now

# Import engine and session wiring
from .db_config import Base, DatabaseManager, import_all_models, initialize_db

# Import models
from .db_configuration_models import ConfigurationRecord
from .db_token_models import AccessToken

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "UUIDMixin",
    "as_utc",
    "utc_now",
    # Engine and sessions
    "DatabaseManager",
    "import_all_models",
    "initialize_db",
    # Models
    "AccessToken",
    "ConfigurationRecord",
]
