"""Tests for the request context and bearer header extraction."""

import threading

import pytest

from config_store_core.context.request_context import (
    RequestContext,
    actor_context,
    extract_bearer_token,
)
from config_store_core.schemas.token_schemas import AuthContext

ALICE = AuthContext(identifier="t-alice", display_name="alice-svc", is_admin=False)
ROOT = AuthContext(identifier="t-root", display_name="root-ops", is_admin=True)


class TestRequestContext:
    """Test thread-local identity storage."""

    def test_anonymous_by_default(self):
        assert RequestContext.get_current_auth() is None
        assert RequestContext.get_current_actor() == "anonymous"

    def test_set_and_clear(self):
        RequestContext.set_current_auth(ALICE)
        assert RequestContext.get_current_actor() == "alice-svc"

        RequestContext.clear()
        assert RequestContext.get_current_auth() is None

    def test_clear_without_identity(self):
        RequestContext.clear()
        RequestContext.clear()

        assert RequestContext.get_current_auth() is None

    def test_identity_is_per_thread(self):
        RequestContext.set_current_auth(ALICE)
        seen = []

        thread = threading.Thread(target=lambda: seen.append(RequestContext.get_current_auth()))
        thread.start()
        thread.join()

        assert seen == [None]
        assert RequestContext.get_current_auth() is ALICE


class TestActorContext:
    """Test the actor_context manager."""

    def test_sets_and_clears(self):
        with actor_context(ALICE):
            assert RequestContext.get_current_auth() is ALICE

        assert RequestContext.get_current_auth() is None

    def test_restores_outer_identity(self):
        with actor_context(ROOT):
            with actor_context(ALICE):
                assert RequestContext.get_current_actor() == "alice-svc"
            assert RequestContext.get_current_actor() == "root-ops"

    def test_anonymous_block(self):
        with actor_context(ROOT):
            with actor_context(None):
                assert RequestContext.get_current_actor() == "anonymous"
            assert RequestContext.get_current_auth() is ROOT

    def test_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with actor_context(ALICE):
                raise RuntimeError("boom")

        assert RequestContext.get_current_auth() is None


class TestExtractBearerToken:
    """Test Authorization header parsing."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc:def:ghi:jkl", "abc:def:ghi:jkl"),
            ("Bearer   padded  ", "padded"),
            ("Bearer ", None),
            ("Basic dXNlcjpwYXNz", None),
            ("bearer lowercase", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected
