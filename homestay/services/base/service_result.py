"""
Outcome of an application-service call.

Services never raise domain errors to their callers: they return a
``ServiceResult`` carrying either the data or a ``ServiceError`` that the
HTTP layer renders into the ``{success, message, data, error}`` envelope.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from homestay.core.exceptions import BaseAppException, ErrorCode


class ErrorSeverity(str, Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class ServiceError:
    code: ErrorCode
    message: str
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_app_exception(cls, exc: BaseAppException) -> "ServiceError":
        return cls(
            code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            severity=ErrorSeverity.CRITICAL if exc.status_code >= 500 else ErrorSeverity.WARNING,
            details=exc.details or None,
        )

    def as_payload(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "details": self.details}


T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Either ``data`` (when ``is_success``) or ``error``, never both.

    ``message`` is the human-readable summary shown in the response
    envelope; failures reuse the error message.
    """

    is_success: bool
    data: Optional[T] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: Optional[T] = None, message: Optional[str] = None) -> "ServiceResult[T]":
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[T]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def from_app_exception(cls, exc: BaseAppException) -> "ServiceResult[T]":
        return cls.failure(ServiceError.from_app_exception(exc))

    def unwrap(self) -> T:
        """Return the data, raising ``ValueError`` with the error code if the call failed."""
        if not self.is_success:
            code = self.error.code.value if self.error else "UNKNOWN"
            reason = self.error.message if self.error else "no error recorded"
            raise ValueError(f"{code}: {reason}")
        return self.data

    def envelope(self) -> Dict[str, Any]:
        return {
            "success": self.is_success,
            "message": self.message,
            "data": self.data if self.is_success else None,
            "error": self.error.as_payload() if self.error else None,
        }

    def __bool__(self) -> bool:
        return self.is_success


__all__ = ["ErrorSeverity", "ServiceError", "ServiceResult"]
