from .configuration_schemas import (
    ConfigurationQuery,
    ConfigurationRead,
    ConfigurationUpsert,
    DefaultConfiguration,
    KeySelector,
    OwnerSelector,
    RecordSelector,
    UpsertResult,
)
from .token_schemas import AuthContext, IssuedToken, TokenCreate, TokenRead

__all__ = [
    "AuthContext",
    "ConfigurationQuery",
    "ConfigurationRead",
    "ConfigurationUpsert",
    "DefaultConfiguration",
    "IssuedToken",
    "KeySelector",
    "OwnerSelector",
    "RecordSelector",
    "TokenCreate",
    "TokenRead",
    "UpsertResult",
]
