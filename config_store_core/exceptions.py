"""
Error model for the configuration store.

Every failure raised by the core is a ConfigStoreError tagged with an
ErrorCode. The code determines the HTTP-like status used when the error is
surfaced to a client, so callers branch on ``error.error_code`` instead of
on exception classes.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Machine-readable error codes exposed to clients."""

    # Client errors
    VALIDATION_FAILED = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    DUPLICATE = "DUPLICATE_ENTRY"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_SERVER_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


STATUS_CODES: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.DUPLICATE: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
}

UNAUTHORIZED_MESSAGE = "Unauthorized"


class ConfigStoreError(Exception):
    """Single error type with error code, context, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = STATUS_CODES[error_code]
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Import logger here to avoid circular dependency at module load time
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code.value}: {self.message}",
                extra=log_data,
                exc_info=self.cause,
            )
        else:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for API responses.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def to_response(self) -> Dict[str, Any]:
        """Render the error the way a GraphQL layer reports it (message + extensions)."""
        return {
            "message": self.message,
            "extensions": {
                "code": self.error_code.value,
                "httpCode": str(self.status_code),
            },
        }

    def add_context(self, **kwargs: Any) -> "ConfigStoreError":
        """Add additional context to the error (fluent interface)."""
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ConfigStoreError:
    """
    Factory for validation errors.

    Args:
        field: Field that failed validation
        value: The invalid value
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        ConfigStoreError with the INVALID_INPUT code
    """
    preview = str(value)
    if len(preview) > 100:
        preview = preview[:100] + "..."
    return ConfigStoreError(
        f"Validation failed for {field}: {reason}",
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        field=field,
        value=preview,
        reason=reason,
    )


def unauthorized() -> ConfigStoreError:
    """
    Factory for authentication and authorization failures.

    Deliberately takes no arguments: every failed check produces the same
    message and context so callers cannot tell which check rejected them.
    """
    return ConfigStoreError(UNAUTHORIZED_MESSAGE, error_code=ErrorCode.UNAUTHORIZED)


def internal_error(
    message: str = "Internal Server Error", cause: Optional[Exception] = None, **context: Any
) -> ConfigStoreError:
    """Factory for invariant violations and programmer misuse."""
    return ConfigStoreError(message, error_code=ErrorCode.INTERNAL_ERROR, cause=cause, **context)


def configuration_error(setting: str, message: Optional[str] = None) -> ConfigStoreError:
    """Factory for missing or invalid server configuration."""
    return ConfigStoreError(
        message or f"Server configuration error: missing {setting}",
        error_code=ErrorCode.CONFIGURATION_ERROR,
        setting=setting,
    )


def duplicate(
    resource_type: str, cause: Optional[Exception] = None, **identifiers: Any
) -> ConfigStoreError:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'AccessToken')
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        ConfigStoreError with the DUPLICATE_ENTRY code
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"Duplicate {resource_type}"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return ConfigStoreError(
        message,
        error_code=ErrorCode.DUPLICATE,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def database_error(
    operation_name: str, resource_type: str, cause: Exception, **context: Any
) -> ConfigStoreError:
    """
    Factory for storage failures that are not constraint violations.

    The driver message stays in the error context and logs; clients only
    see which operation failed.
    """
    return ConfigStoreError(
        f"Database error for {resource_type} in {operation_name}",
        error_code=ErrorCode.DATABASE_ERROR,
        cause=cause,
        operation_name=operation_name,
        resource_type=resource_type,
        **context,
    )


def error_response(error: BaseException) -> Dict[str, Any]:
    """
    Convert any exception into a client-safe response payload.

    Unknown exceptions collapse into a generic internal error so that no
    implementation detail reaches the client.
    """
    if isinstance(error, ConfigStoreError):
        return error.to_response()
    return internal_error(cause=error if isinstance(error, Exception) else None).to_response()


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
