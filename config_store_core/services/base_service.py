"""
Shared plumbing for services that work directly on a SQLAlchemy session.

Services receive a session from their caller and own the transaction
boundary of each operation: commit on success, roll back and translate the
error on failure.
"""

from contextlib import contextmanager
from typing import Any, Dict, NoReturn, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import ConfigStoreError, database_error, duplicate, validation_failed
from ..utils.logger import get_logger

TModel = TypeVar("TModel", bound=BaseModel)


class SessionService:
    """Base class for services bound to a caller-supplied session."""

    resource_type = "Resource"

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger()

    def _parse(
        self, schema: Type[TModel], data: Any, context: Optional[Dict[str, Any]] = None
    ) -> TModel:
        """
        Validate input against a schema, reporting the first problem as a validation error.

        Args:
            schema: Input schema to validate against
            data: Mapping of field values
            context: Limits made available to the schema validators
        """
        try:
            return schema.model_validate(data, context=context)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or schema.__name__
            # Report a validator's own message without the "Value error, " prefix
            error = first.get("ctx", {}).get("error")
            reason = str(error) if first["type"] == "value_error" and error else first["msg"]
            raise validation_failed(field, first.get("input"), reason, cause=e)

    def _handle_db_error(self, e: Exception, operation_name: str, **context: Any) -> NoReturn:
        """
        Translate a storage exception into a ConfigStoreError.

        Args:
            e: The original exception
            operation_name: Name of the operation that failed
            **context: Additional context for the error
        """
        if isinstance(e, ConfigStoreError):
            raise e

        if isinstance(e, IntegrityError):
            error_message = str(e.orig).lower() if getattr(e, "orig", None) else str(e).lower()
            if "unique" in error_message or "duplicate" in error_message:
                self.logger.warning(
                    f"Duplicate {self.resource_type} in {operation_name}",
                    extra={"operation_name": operation_name, **context},
                )
                raise duplicate(self.resource_type, cause=e, **context)

        if isinstance(e, SQLAlchemyError):
            raise database_error(operation_name, self.resource_type, e, **context)

        raise e

    @contextmanager
    def _transaction(self, operation_name: str, **context: Any):
        """Commit the session after the block, or roll back and translate the error."""
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            self._handle_db_error(e, operation_name, **context)
        except Exception:
            self.session.rollback()
            raise
