"""
Unit tests for the error model.

Covers ConfigStoreError, the factory functions, response rendering and
correlation ids.
"""

import pytest

from config_store_core.exceptions import (
    UNAUTHORIZED_MESSAGE,
    ConfigStoreError,
    ErrorCode,
    clear_correlation_id,
    configuration_error,
    database_error,
    duplicate,
    error_response,
    get_correlation_id,
    internal_error,
    set_correlation_id,
    unauthorized,
    validation_failed,
)


class TestConfigStoreError:
    """Test ConfigStoreError."""

    def test_basic_error_creation(self):
        error = ConfigStoreError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.error_id is not None
        assert error.timestamp is not None
        assert error.context["error_id"] == error.error_id
        assert str(error) == "Test error message"

    @pytest.mark.parametrize(
        "code, status",
        [
            (ErrorCode.VALIDATION_FAILED, 400),
            (ErrorCode.UNAUTHORIZED, 401),
            (ErrorCode.DUPLICATE, 409),
            (ErrorCode.INTERNAL_ERROR, 500),
            (ErrorCode.CONFIGURATION_ERROR, 500),
            (ErrorCode.DATABASE_ERROR, 500),
        ],
    )
    def test_status_derived_from_code(self, code, status):
        error = ConfigStoreError("x", error_code=code)

        assert error.status_code == status
        assert error.is_client_error is (status < 500)

    def test_wire_codes(self):
        assert ErrorCode.VALIDATION_FAILED.value == "INVALID_INPUT"
        assert ErrorCode.UNAUTHORIZED.value == "UNAUTHORIZED"
        assert ErrorCode.INTERNAL_ERROR.value == "INTERNAL_SERVER_ERROR"

    def test_cause_is_recorded(self):
        cause = ValueError("root cause")

        error = ConfigStoreError("wrapped", cause=cause)

        assert error.context["cause"]["type"] == "ValueError"
        assert error.context["cause"]["message"] == "root cause"
        assert error.error_chain == [error, cause]

    def test_to_dict_hides_cause_by_default(self):
        error = ConfigStoreError("wrapped", cause=ValueError("secret detail"), key="theme")

        result = error.to_dict()

        assert result["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert result["error"]["context"] == {"key": "theme"}
        assert "cause" not in result["error"]

    def test_to_dict_with_cause(self):
        error = ConfigStoreError("wrapped", cause=ValueError("detail"))

        result = error.to_dict(include_cause=True)

        assert result["error"]["cause"] == {"type": "ValueError", "message": "detail"}

    def test_to_response_is_graphql_style(self):
        error = validation_failed("key", "", "Key must be at least 1 character(s) long")

        assert error.to_response() == {
            "message": "Validation failed for key: Key must be at least 1 character(s) long",
            "extensions": {"code": "INVALID_INPUT", "httpCode": "400"},
        }

    def test_add_context_is_fluent(self):
        error = ConfigStoreError("x")

        assert error.add_context(operation_name="op") is error
        assert error.context["operation_name"] == "op"


class TestFactories:
    """Test factory functions."""

    def test_validation_failed_truncates_value_preview(self):
        error = validation_failed("value", "x" * 500, "too long")

        assert error.error_code == ErrorCode.VALIDATION_FAILED
        assert error.context["field"] == "value"
        assert len(error.context["value"]) == 103

    def test_unauthorized_is_always_identical(self):
        first, second = unauthorized(), unauthorized()

        assert first.message == second.message == UNAUTHORIZED_MESSAGE
        assert first.to_response() == second.to_response()
        assert first.to_response()["extensions"] == {"code": "UNAUTHORIZED", "httpCode": "401"}

    def test_internal_error_defaults(self):
        error = internal_error()

        assert error.message == "Internal Server Error"
        assert error.status_code == 500

    def test_configuration_error_names_setting(self):
        error = configuration_error("APP_SECRET")

        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert "APP_SECRET" in error.message
        assert error.context["setting"] == "APP_SECRET"

    def test_duplicate_lists_identifiers(self):
        error = duplicate("AccessToken", token_id="t-1")

        assert error.message == "Duplicate AccessToken: token_id=t-1"
        assert error.status_code == 409

    def test_database_error(self):
        error = database_error("upsert", "ConfigurationRecord", RuntimeError("locked"))

        assert error.error_code == ErrorCode.DATABASE_ERROR
        assert error.context["operation_name"] == "upsert"

    def test_database_error_keeps_driver_text_out_of_response(self):
        cause = RuntimeError("INSERT INTO configurations (key) VALUES ('secret-key')")

        error = database_error("upsert", "ConfigurationRecord", cause)

        assert "secret-key" not in error.message
        assert "secret-key" not in str(error.to_response())
        assert "secret-key" not in str(error.to_dict())
        assert error.context["cause"]["message"] == str(cause)


class TestErrorResponse:
    """Test error_response."""

    def test_known_error_passes_through(self):
        assert error_response(unauthorized())["extensions"]["code"] == "UNAUTHORIZED"

    def test_unknown_error_is_generic(self):
        response = error_response(KeyError("internal detail"))

        assert response == {
            "message": "Internal Server Error",
            "extensions": {"code": "INTERNAL_SERVER_ERROR", "httpCode": "500"},
        }


class TestCorrelationId:
    """Test correlation id helpers."""

    def test_set_get_clear(self):
        set_correlation_id("corr-1")
        assert get_correlation_id() == "corr-1"

        clear_correlation_id()
        assert get_correlation_id() is None

    def test_errors_pick_up_correlation_id(self):
        set_correlation_id("corr-2")
        try:
            error = ConfigStoreError("x")
        finally:
            clear_correlation_id()

        assert error.context["correlation_id"] == "corr-2"
        assert error.to_dict()["error"]["correlation_id"] == "corr-2"
