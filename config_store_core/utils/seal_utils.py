"""
HMAC tamper seal for bearer tokens.

The seal is an HMAC-SHA512 over the canonical token payload keyed with the
server secret. The key is injected by whoever builds the TamperSeal; a
missing key is a server configuration error, raised only when the seal is
actually used.
"""

import hashlib
import hmac
from typing import Optional

from ..constants import EnvironmentVariable
from ..exceptions import configuration_error


class TamperSeal:
    """Sign and verify canonical bearer payloads."""

    def __init__(self, secret_key: Optional[str]):
        self._secret_key = secret_key.encode("utf-8") if secret_key else None

    @property
    def is_configured(self) -> bool:
        return self._secret_key is not None

    def require_key(self) -> bytes:
        if self._secret_key is None:
            raise configuration_error(EnvironmentVariable.APP_SECRET.value)
        return self._secret_key

    def sign(self, payload: str) -> str:
        """Return the hex HMAC-SHA512 of ``payload``."""
        return hmac.new(self.require_key(), payload.encode("utf-8"), hashlib.sha512).hexdigest()

    def verify(self, payload: str, seal_hex: str) -> bool:
        """Recompute the seal and compare in constant time."""
        expected = self.sign(payload)
        try:
            provided = bytes.fromhex(seal_hex)
        except ValueError:
            return False
        return hmac.compare_digest(provided, bytes.fromhex(expected))
