"""
Slow one-way hashing for token secrets.

bcrypt embeds a per-call random salt and the cost factor in the hash it
returns, so the stored hash is all that is needed to verify later.
"""

import secrets

import bcrypt

from ..constants import Limits


def generate_secret(num_bytes: int = Limits.SECRET_BYTES) -> str:
    """Return a hex-encoded random secret (256 bits by default)."""
    return secrets.token_hex(num_bytes)


class SecretHasher:
    """bcrypt hash/verify with a configurable cost factor."""

    def __init__(self, rounds: int = Limits.DEFAULT_HASH_ROUNDS):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode(
            "ascii"
        )

    def verify(self, secret: str, secret_hash: str) -> bool:
        """
        Check ``secret`` against a stored hash.

        Returns False instead of raising when the hash is malformed or the
        secret cannot be checked (bcrypt rejects inputs over 72 bytes).
        """
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), secret_hash.encode("utf-8"))
        except (TypeError, ValueError):
            return False
