"""
Service for issuing, verifying and revoking bearer credentials.

A credential is split in two: the persisted AccessToken row holds a bcrypt
hash of the secret, and the bearer string handed to the client holds the
plaintext secret under an HMAC tamper seal. The signing key and hash cost
are constructor parameters so each service instance can be configured
independently.
"""

import uuid
from datetime import timedelta
from typing import Callable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..config import AppConfig, get_config
from ..constants import Limits
from ..context.operation_context import operation
from ..db.db_base import as_utc, utc_now
from ..db.db_token_models import AccessToken
from ..enums import TokenRole
from ..exceptions import ConfigStoreError, ErrorCode, internal_error, unauthorized
from ..schemas.token_schemas import AuthContext, IssuedToken, TokenCreate, TokenRead
from ..utils.bearer_utils import build_bearer_token, unseal_bearer_token
from ..utils.seal_utils import TamperSeal
from ..utils.secret_utils import SecretHasher, generate_secret
from .base_service import SessionService


def _new_identifier() -> str:
    return str(uuid.uuid4())


class TokenService(SessionService):
    """
    Issues and verifies bearer credentials.

    Every verification failure raises the same UNAUTHORIZED error; the
    reason is only written to the debug log.
    """

    resource_type = "AccessToken"

    def __init__(
        self,
        session: Session,
        signing_key: Optional[str],
        hash_rounds: int = Limits.DEFAULT_HASH_ROUNDS,
        identifier_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Args:
            session: SQLAlchemy session
            signing_key: Server-wide key for the tamper seal. May be None; the
                missing key is reported when a token is issued or verified.
            hash_rounds: bcrypt cost factor
            identifier_factory: Source of new token identifiers
        """
        super().__init__(session)
        self.seal = TamperSeal(signing_key)
        self.hasher = SecretHasher(hash_rounds)
        self._new_identifier = identifier_factory or _new_identifier

    @classmethod
    def from_config(cls, session: Session, config: Optional[AppConfig] = None) -> "TokenService":
        """Build a service from the application's security settings."""
        config = config or get_config()
        return cls(
            session,
            signing_key=config.security.app_secret,
            hash_rounds=config.security.hash_rounds,
        )

    @operation()
    def issue(
        self,
        display_name: str,
        role: TokenRole = TokenRole.REGULAR,
        expires_in_days: Optional[int] = None,
    ) -> IssuedToken:
        """
        Create a credential and return its bearer string.

        The bearer string is only available in the returned value. Identifier
        collisions are retried with a fresh identifier up to
        ``Limits.MAX_ISSUE_ATTEMPTS`` times.

        Raises:
            ConfigStoreError: INVALID_INPUT for a bad name, role or lifetime;
                CONFIGURATION_ERROR when no signing key is configured
        """
        request = self._parse(
            TokenCreate,
            {"display_name": display_name, "role": role, "expires_in_days": expires_in_days},
        )
        self.seal.require_key()

        secret = generate_secret()
        secret_hash = self.hasher.hash(secret)
        expires_at = (
            utc_now() + timedelta(days=request.expires_in_days)
            if request.expires_in_days
            else None
        )

        for attempt in range(1, Limits.MAX_ISSUE_ATTEMPTS + 1):
            token = AccessToken(
                id=self._new_identifier(),
                secret_hash=secret_hash,
                display_name=request.display_name,
                is_admin=request.role == TokenRole.ADMIN,
                revoked=False,
                expires_at=expires_at,
            )
            try:
                with self._transaction("issue", token_id=token.id):
                    self.session.add(token)
            except ConfigStoreError as e:
                if e.error_code != ErrorCode.DUPLICATE:
                    raise
                self.logger.warning(
                    "Token identifier collision, retrying with a new identifier",
                    extra={"attempt": attempt},
                )
                continue

            bearer_token = build_bearer_token(self.seal, token.id, token.display_name, secret)
            self.logger.info(
                "Token issued",
                extra={
                    "token_id": token.id,
                    "display_name": token.display_name,
                    "is_admin": token.is_admin,
                },
            )
            return IssuedToken(bearer_token=bearer_token, token=TokenRead.model_validate(token))

        raise internal_error(
            "Could not allocate a unique token identifier", attempts=Limits.MAX_ISSUE_ATTEMPTS
        )

    def _reject(self, reason: str, token_id: Optional[str] = None):
        self.logger.debug("Token verification failed", extra={"reason": reason, "token_id": token_id})
        return unauthorized()

    def _is_expired(self, token: AccessToken) -> bool:
        return token.expires_at is not None and as_utc(token.expires_at) <= utc_now()

    @operation()
    def verify(self, bearer_token: str, require_admin: bool = False) -> AuthContext:
        """
        Authenticate a bearer string.

        Checks, in order: signing key present, bearer structure, tamper seal,
        credential exists, not revoked, not expired, admin when required,
        secret matches the stored hash.

        Raises:
            ConfigStoreError: UNAUTHORIZED for any failed check;
                CONFIGURATION_ERROR when no signing key is configured
        """
        parsed = unseal_bearer_token(self.seal, bearer_token)
        if parsed is None:
            raise self._reject("malformed or unsealed")

        token = self.session.get(AccessToken, parsed.identifier, populate_existing=True)
        if token is None:
            raise self._reject("unknown", parsed.identifier)
        if token.revoked:
            raise self._reject("revoked", token.id)
        if self._is_expired(token):
            raise self._reject("expired", token.id)
        if require_admin and not token.is_admin:
            raise self._reject("not admin", token.id)
        if token.display_name != parsed.display_name:
            raise self._reject("name mismatch", token.id)
        if not self.hasher.verify(parsed.secret, token.secret_hash):
            raise self._reject("secret mismatch", token.id)

        return AuthContext(
            identifier=token.id, display_name=token.display_name, is_admin=token.is_admin
        )

    def peek_display_name(self, bearer_token: str) -> Optional[str]:
        """Display name from a sealed bearer string, without a database lookup."""
        parsed = unseal_bearer_token(self.seal, bearer_token)
        return parsed.display_name if parsed is not None else None

    @operation()
    def revoke(self, identifier: str) -> Optional[TokenRead]:
        """
        Revoke a credential.

        Returns:
            The revoked token, or None when no active token has this identifier
            (including one that is already revoked)
        """
        now = utc_now()
        stmt = (
            update(AccessToken)
            .where(AccessToken.id == identifier, AccessToken.revoked.is_(False))
            .values(revoked=True, revoked_at=now, updated_at=now)
        )
        with self._transaction("revoke", token_id=identifier):
            result = self.session.execute(stmt)

        if result.rowcount == 0:
            self.logger.info("Token not found to revoke", extra={"token_id": identifier})
            return None

        self.logger.info("Token revoked", extra={"token_id": identifier})
        return self.get_token(identifier)

    def get_token(self, identifier: str) -> Optional[TokenRead]:
        token = self.session.get(AccessToken, identifier, populate_existing=True)
        return TokenRead.model_validate(token) if token is not None else None

    @operation()
    def list_tokens(self, include_revoked: bool = False) -> List[TokenRead]:
        """List tokens oldest first. Hashes are never part of the result."""
        stmt = select(AccessToken).order_by(AccessToken.created_at, AccessToken.id)
        if not include_revoked:
            stmt = stmt.where(AccessToken.revoked.is_(False))
        return [TokenRead.model_validate(t) for t in self.session.scalars(stmt)]

    @operation()
    def delete_all(self, confirm: bool = False) -> int:
        """Physically delete every token. Requires ``confirm=True``."""
        if confirm is not True:
            raise internal_error("delete_all requires confirm=True", resource_type=self.resource_type)
        with self._transaction("delete_all"):
            result = self.session.execute(delete(AccessToken))
        self.logger.warning("All tokens deleted", extra={"deleted": result.rowcount})
        return result.rowcount
