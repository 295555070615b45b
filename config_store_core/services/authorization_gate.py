"""
Authorization gate in front of the configuration and token services.

Each gated operation has an AccessPolicy. The bearer string is verified
according to that policy before the wrapped service is called, so a caller
that fails authorization never reaches storage. The verified identity is
passed to the store as the provenance actor and set as the request context
for logging while the call runs.
"""

from typing import Any, Dict, Iterable, List, Optional

from ..constants import ANONYMOUS_ACTOR
from ..context.request_context import actor_context
from ..enums import AccessPolicy, TokenRole
from ..exceptions import ConfigStoreError, ErrorCode, unauthorized
from ..schemas.configuration_schemas import ConfigurationRead, UpsertResult
from ..schemas.token_schemas import AuthContext, IssuedToken, TokenRead
from .configuration_service import ConfigurationService
from .token_service import TokenService

DEFAULT_POLICIES: Dict[str, AccessPolicy] = {
    # Owner-scoped configuration
    "upsert": AccessPolicy.ANY_VALID_TOKEN,
    "resolve": AccessPolicy.ANY_VALID_TOKEN,
    "delete_by_owner": AccessPolicy.ANY_VALID_TOKEN,
    "delete_by_key_and_owner": AccessPolicy.ANY_VALID_TOKEN,
    # Defaults and bulk configuration
    "upsert_default": AccessPolicy.ADMIN_TOKEN,
    "upsert_defaults": AccessPolicy.ADMIN_TOKEN,
    "delete_default": AccessPolicy.ADMIN_TOKEN,
    "delete_by_key": AccessPolicy.ADMIN_TOKEN,
    "delete_all": AccessPolicy.ADMIN_TOKEN,
    # Token administration
    "issue_token": AccessPolicy.ADMIN_TOKEN,
    "revoke_token": AccessPolicy.ADMIN_TOKEN,
    "list_tokens": AccessPolicy.ADMIN_TOKEN,
    "delete_all_tokens": AccessPolicy.ADMIN_TOKEN,
}


def actor_name(auth: Optional[AuthContext]) -> str:
    """Provenance name for an identity."""
    return auth.display_name if auth is not None else ANONYMOUS_ACTOR


class AuthorizationGate:
    """Applies per-operation access policies before delegating to the services."""

    def __init__(
        self,
        token_service: TokenService,
        configuration_service: ConfigurationService,
        policies: Optional[Dict[str, AccessPolicy]] = None,
    ):
        self.token_service = token_service
        self.configuration_service = configuration_service
        self.policies = {**DEFAULT_POLICIES, **(policies or {})}

    def policy_for(self, operation_name: str) -> AccessPolicy:
        return self.policies[operation_name]

    def authorize(
        self, bearer_token: Optional[str], policy: AccessPolicy
    ) -> Optional[AuthContext]:
        """
        Verify ``bearer_token`` as ``policy`` demands.

        For ``AccessPolicy.NONE`` a presented token is still verified so the
        caller can be named in provenance, but an absent or invalid token
        yields None instead of an error.

        Raises:
            ConfigStoreError: UNAUTHORIZED when the policy is not satisfied
        """
        if policy == AccessPolicy.NONE:
            if not bearer_token:
                return None
            try:
                return self.token_service.verify(bearer_token)
            except ConfigStoreError as e:
                if e.error_code != ErrorCode.UNAUTHORIZED:
                    raise
                return None

        if not bearer_token:
            raise unauthorized()
        return self.token_service.verify(
            bearer_token, require_admin=policy == AccessPolicy.ADMIN_TOKEN
        )

    def _authorize_operation(
        self, bearer_token: Optional[str], operation_name: str
    ) -> Optional[AuthContext]:
        return self.authorize(bearer_token, self.policy_for(operation_name))

    # Configuration

    def upsert(
        self, bearer_token: Optional[str], key: str, value: Any, owner: Optional[str] = None
    ) -> UpsertResult:
        operation_name = "upsert" if owner is not None else "upsert_default"
        auth = self._authorize_operation(bearer_token, operation_name)
        with actor_context(auth):
            return self.configuration_service.upsert(key, value, owner, actor=actor_name(auth))

    def upsert_defaults(
        self, bearer_token: Optional[str], items: Iterable[Any]
    ) -> List[UpsertResult]:
        auth = self._authorize_operation(bearer_token, "upsert_defaults")
        with actor_context(auth):
            return self.configuration_service.upsert_defaults(items, actor=actor_name(auth))

    def resolve(
        self, bearer_token: Optional[str], owner: Optional[str], keys: Optional[Iterable[str]] = None
    ) -> List[ConfigurationRead]:
        auth = self._authorize_operation(bearer_token, "resolve")
        with actor_context(auth):
            return self.configuration_service.resolve(owner, keys)

    def delete_by_key(self, bearer_token: Optional[str], key: str) -> int:
        auth = self._authorize_operation(bearer_token, "delete_by_key")
        with actor_context(auth):
            return self.configuration_service.delete_by_key(key, actor=actor_name(auth))

    def delete_by_owner(self, bearer_token: Optional[str], owner: str) -> int:
        auth = self._authorize_operation(bearer_token, "delete_by_owner")
        with actor_context(auth):
            return self.configuration_service.delete_by_owner(owner, actor=actor_name(auth))

    def delete_by_key_and_owner(
        self, bearer_token: Optional[str], key: str, owner: Optional[str]
    ) -> int:
        operation_name = "delete_by_key_and_owner" if owner is not None else "delete_default"
        auth = self._authorize_operation(bearer_token, operation_name)
        with actor_context(auth):
            return self.configuration_service.delete_by_key_and_owner(
                key, owner, actor=actor_name(auth)
            )

    def delete_all(self, bearer_token: Optional[str], confirm: bool = False) -> int:
        auth = self._authorize_operation(bearer_token, "delete_all")
        with actor_context(auth):
            return self.configuration_service.delete_all(actor=actor_name(auth), confirm=confirm)

    # Tokens

    def issue_token(
        self,
        bearer_token: Optional[str],
        display_name: str,
        role: TokenRole = TokenRole.REGULAR,
        expires_in_days: Optional[int] = None,
    ) -> IssuedToken:
        auth = self._authorize_operation(bearer_token, "issue_token")
        with actor_context(auth):
            return self.token_service.issue(display_name, role, expires_in_days)

    def revoke_token(self, bearer_token: Optional[str], identifier: str) -> Optional[TokenRead]:
        auth = self._authorize_operation(bearer_token, "revoke_token")
        with actor_context(auth):
            return self.token_service.revoke(identifier)

    def list_tokens(
        self, bearer_token: Optional[str], include_revoked: bool = False
    ) -> List[TokenRead]:
        auth = self._authorize_operation(bearer_token, "list_tokens")
        with actor_context(auth):
            return self.token_service.list_tokens(include_revoked)

    def delete_all_tokens(self, bearer_token: Optional[str], confirm: bool = False) -> int:
        auth = self._authorize_operation(bearer_token, "delete_all_tokens")
        with actor_context(auth):
            return self.token_service.delete_all(confirm)
