from .authorization_gate import DEFAULT_POLICIES, AuthorizationGate, actor_name
from .base_service import SessionService
from .configuration_service import ConfigurationService
from .token_service import TokenService

__all__ = [
    "DEFAULT_POLICIES",
    "AuthorizationGate",
    "ConfigurationService",
    "SessionService",
    "TokenService",
    "actor_name",
]
