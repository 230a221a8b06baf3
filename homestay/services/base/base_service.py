"""
Base service class providing common functionality for application services.
"""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from homestay.config.settings import Settings, get_settings
from homestay.core.exceptions import BaseAppException, ErrorCode
from homestay.core.logging import get_logger
from homestay.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from homestay.utils.date_utils import local_date, now_utc, to_utc

Clock = Callable[[], datetime]


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger, settings, clock and db session
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    """

    def __init__(
        self,
        db_session: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            settings: Application settings (defaults to the cached instance)
            clock: Callable returning the current aware datetime
        """
        self.db: Session = db_session
        self.settings: Settings = settings or get_settings()
        self._clock: Clock = clock or now_utc
        self._logger = get_logger(f"homestay.services.{self.__class__.__name__}")

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    def now(self) -> datetime:
        return to_utc(self._clock())

    def today(self) -> date:
        """Current calendar date in the hotel's timezone."""
        return local_date(self.now(), self.settings.TIMEZONE)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Domain exceptions keep their own code and message. Storage failures
        are logged with traceback and reported generically.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, code...)
            additional_context: Extra context for logging
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        if isinstance(exception, BaseAppException):
            log = self._logger.error if exception.status_code >= 500 else self._logger.warning
            log(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.from_app_exception(exception)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        if isinstance(exception, IntegrityError):
            return ServiceResult.failure(
                ServiceError(
                    code=ErrorCode.CONFLICT,
                    message=f"Failed to {operation}: conflicting data",
                    severity=ErrorSeverity.WARNING,
                    details={"entity_ref": context["entity_ref"]},
                    status_code=409,
                )
            )

        error_code = (
            ErrorCode.DATABASE_ERROR
            if isinstance(exception, SQLAlchemyError)
            else ErrorCode.INTERNAL_ERROR
        )
        return ServiceResult.failure(
            ServiceError(
                code=error_code,
                message=f"Failed to {operation}",
                severity=ErrorSeverity.CRITICAL,
                details={"entity_ref": context["entity_ref"]},
                status_code=500,
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.repository.create(entity)
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception:
            self._rollback()
            raise

    def _commit(self) -> None:
        self.db.commit()
        self._logger.debug("Transaction committed successfully")

    def _rollback(self) -> None:
        """Rollback the current transaction, logging rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # The original error is re-raised by the caller
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = {"entity_ref": str(entity_ref) if entity_ref else None}
        if extra:
            context.update(extra)

        self._logger.info(f"Operation: {operation}", extra=context)
