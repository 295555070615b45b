"""
Bearer string encoding.

Wire format::

    base64(identifier):base64(display_name):secret:base64(seal)

where ``seal`` is the raw HMAC-SHA512 digest over the first three segments
joined with ``:``. Parsing is strict: every base64 segment must be the
canonical encoding of its decoded value, so a segment can only decode to one
value and any edited character is either rejected here or changes the
sealed payload.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Optional

from .seal_utils import TamperSeal

SEGMENT_SEPARATOR = ":"
SEGMENT_COUNT = 4


@dataclass(frozen=True)
class BearerToken:
    """Decoded bearer string."""

    identifier: str
    display_name: str
    secret: str
    seal: str
    payload: str


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode_canonical(segment: str) -> Optional[bytes]:
    try:
        raw = base64.b64decode(segment.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return None
    if _b64encode(raw) != segment:
        return None
    return raw


def canonical_payload(identifier: str, display_name: str, secret: str) -> str:
    """The sealed part of a bearer string."""
    return SEGMENT_SEPARATOR.join(
        [
            _b64encode(identifier.encode("utf-8")),
            _b64encode(display_name.encode("utf-8")),
            secret,
        ]
    )


def build_bearer_token(seal: TamperSeal, identifier: str, display_name: str, secret: str) -> str:
    """Assemble and seal a bearer string."""
    payload = canonical_payload(identifier, display_name, secret)
    seal_b64 = _b64encode(bytes.fromhex(seal.sign(payload)))
    return f"{payload}{SEGMENT_SEPARATOR}{seal_b64}"


def parse_bearer_token(bearer: str) -> Optional[BearerToken]:
    """
    Split and decode a bearer string without checking its seal.

    Returns None for any structural problem; callers turn that into the
    same error they raise for every other failed check.
    """
    if not isinstance(bearer, str):
        return None

    parts = bearer.split(SEGMENT_SEPARATOR)
    if len(parts) != SEGMENT_COUNT:
        return None
    identifier_b64, name_b64, secret, seal_b64 = parts
    if not secret:
        return None

    raw_identifier = _b64decode_canonical(identifier_b64)
    raw_name = _b64decode_canonical(name_b64)
    raw_seal = _b64decode_canonical(seal_b64)
    if raw_identifier is None or raw_name is None or raw_seal is None:
        return None

    try:
        identifier = raw_identifier.decode("utf-8")
        display_name = raw_name.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if not identifier or not display_name:
        return None

    return BearerToken(
        identifier=identifier,
        display_name=display_name,
        secret=secret,
        seal=raw_seal.hex(),
        payload=SEGMENT_SEPARATOR.join(parts[:3]),
    )


def unseal_bearer_token(seal: TamperSeal, bearer: str) -> Optional[BearerToken]:
    """
    Parse a bearer string and check its tamper seal.

    A missing signing key raises before the bearer is even looked at, so a
    misconfigured server never reports it as a bad token.
    """
    seal.require_key()
    token = parse_bearer_token(bearer)
    if token is None or not seal.verify(token.payload, token.seal):
        return None
    return token
