"""Tests for the HMAC tamper seal."""

import hashlib
import hmac

import pytest

from config_store_core.exceptions import ConfigStoreError, ErrorCode
from config_store_core.utils.seal_utils import TamperSeal


class TestTamperSeal:
    """Test TamperSeal sign/verify."""

    @pytest.fixture
    def seal(self):
        return TamperSeal("unit-test-key")

    def test_sign_is_hmac_sha512_hex(self, seal):
        expected = hmac.new(b"unit-test-key", b"payload", hashlib.sha512).hexdigest()

        assert seal.sign("payload") == expected
        assert len(seal.sign("payload")) == 128

    def test_verify_accepts_own_seal(self, seal):
        assert seal.verify("payload", seal.sign("payload")) is True

    def test_verify_rejects_other_payload(self, seal):
        assert seal.verify("payload2", seal.sign("payload")) is False

    def test_verify_rejects_seal_from_other_key(self, seal):
        other = TamperSeal("another-key")

        assert seal.verify("payload", other.sign("payload")) is False

    @pytest.mark.parametrize("bad_seal", ["", "zz", "abc", "00" * 64])
    def test_verify_rejects_malformed_or_wrong_seal(self, seal, bad_seal):
        assert seal.verify("payload", bad_seal) is False

    @pytest.mark.parametrize("key", [None, ""])
    def test_missing_key_is_configuration_error(self, key):
        seal = TamperSeal(key)

        assert seal.is_configured is False
        with pytest.raises(ConfigStoreError) as exc_info:
            seal.sign("payload")

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
        assert exc_info.value.status_code == 500

    def test_verify_with_missing_key_raises_instead_of_failing(self):
        with pytest.raises(ConfigStoreError) as exc_info:
            TamperSeal(None).verify("payload", "00" * 64)

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
