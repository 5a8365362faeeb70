"""
Base Service.

Base class for the note and user services. Services resolve the acting
user, ask the authorization policy, validate input and then call the
repositories. They never commit; the request dependency owns the
transaction.

Usage:
    from personal_notes.backend.services.base import BaseService

    class NoteService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = NoteRepository(session)
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from personal_notes.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from personal_notes.backend.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Access to the request's database session
    - A logger named after the concrete service module
    - Translation of SQLAlchemy errors into application errors
    - Field validation helpers that raise ValidationError

    Subclasses call super().__init__(session) and build their
    repositories on the same session.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the service with a database session.

        Args:
            session: Async session shared with the service's repositories
        """
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Await a repository call and translate database errors.

        Args:
            operation: Short description used in logs and error messages,
                e.g. "create note"
            coro: Awaitable repository call

        Returns:
            Result of the awaited call

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other integrity or driver errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            # SQLite says "UNIQUE constraint failed", PostgreSQL "duplicate key"
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists")
            raise DatabaseError(f"Database constraint violation: {operation}")
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}")

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not blank.

        A string made only of whitespace counts as blank.

        Args:
            fields: Field names mapped to submitted values
            field_names: Names that must be present and non-blank

        Raises:
            ValidationError: With every missing field listed in
                details["missing_fields"]
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _validate_string_length(
        self,
        value: str,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None,
    ) -> None:
        """
        Validate string length constraints.

        Args:
            value: String to check
            field_name: Field name used in the message and details
            min_length: Minimum allowed length, unchecked when None
            max_length: Maximum allowed length, unchecked when None

        Raises:
            ValidationError: If the length is out of bounds
        """
        if min_length is not None and len(value) < min_length:
            raise ValidationError(
                f"{field_name} too short",
                details={field_name: f"Minimum length is {min_length}"},
            )
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                f"{field_name} too long",
                details={field_name: f"Maximum length is {max_length}"},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation at INFO.

        Args:
            operation: Event message, e.g. "Creating note"
            **context: Identifiers to attach, such as actor_id and note_id
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in the log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
