"""
Request context management for the configuration store.

Holds the identity established for the current request in thread-local
storage so that logging can stamp it onto records without it being passed
through every call. Services never read it to make decisions: the gate
passes the actor explicitly.
"""

import threading
from contextlib import contextmanager
from typing import Generator, Optional

from ..constants import ANONYMOUS_ACTOR, BEARER_PREFIX
from ..schemas.token_schemas import AuthContext


class RequestContext:
    """
    Manages the authenticated identity of the current request using
    thread-local storage.
    """

    _thread_local = threading.local()

    @classmethod
    def set_current_auth(cls, auth: Optional[AuthContext]) -> None:
        cls._thread_local.auth = auth

    @classmethod
    def get_current_auth(cls) -> Optional[AuthContext]:
        """Current AuthContext, or None for anonymous requests."""
        return getattr(cls._thread_local, "auth", None)

    @classmethod
    def get_current_actor(cls) -> str:
        """Display name of the current identity, or the anonymous actor."""
        auth = cls.get_current_auth()
        return auth.display_name if auth is not None else ANONYMOUS_ACTOR

    @classmethod
    def clear(cls) -> None:
        if hasattr(cls._thread_local, "auth"):
            delattr(cls._thread_local, "auth")


@contextmanager
def actor_context(auth: Optional[AuthContext]) -> Generator[None, None, None]:
    """
    Set the current identity for the duration of the block and restore the
    previous one afterwards.
    """
    previous = RequestContext.get_current_auth()
    RequestContext.set_current_auth(auth)
    try:
        yield
    finally:
        if previous is not None:
            RequestContext.set_current_auth(previous)
        else:
            RequestContext.clear()


def extract_bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """
    Pull the bearer string out of an ``Authorization`` header value.

    Returns None when the header is missing or uses another scheme.
    """
    if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
        return None
    token = authorization_header[len(BEARER_PREFIX):].strip()
    return token or None
