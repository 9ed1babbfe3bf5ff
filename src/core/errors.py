"""Error classification utilities for API and background errors."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel

from src.core.config import constants
from src.core.db_client import DatabaseError, DuplicateRecordError


class ErrorCategory(Enum):
    """Categories of errors that can reach a caller."""

    VALIDATION_FAILED = "validation_failed"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    DUPLICATE_RECORD = "duplicate_record"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Input errors
    ERR_VALIDATION_FAILED = "ERR_VALIDATION_FAILED"
    ERR_INVALID_DATE = "ERR_INVALID_DATE"
    ERR_INVALID_TIME = "ERR_INVALID_TIME"
    ERR_DEFAULT_WISH_LIST = "ERR_DEFAULT_WISH_LIST"

    # Access errors
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"

    # Storage errors
    ERR_DUPLICATE_RECORD = "ERR_DUPLICATE_RECORD"
    ERR_STORAGE_UNAVAILABLE = "ERR_STORAGE_UNAVAILABLE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_ERROR_PATTERNS: dict[Literal["date", "time", "storage"], list[str]] = {
    "date": ["invalid date", "invalid isoformat string", "month must be in", "day is out of range"],
    "time": ["hh:mm", "a time is required"],
    "storage": ["database is locked", "unable to open", "disk i/o", "connection", "timeout"],
}


def _matches(error_str: str, pattern_type: Literal["date", "time", "storage"]) -> bool:
    return any(phrase in error_str for phrase in _ERROR_PATTERNS[pattern_type])


def classify_error(exception: Exception) -> ErrorCategory:
    """Map an exception to its error category."""
    if isinstance(exception, DuplicateRecordError):
        return ErrorCategory.DUPLICATE_RECORD
    if isinstance(exception, (DatabaseError, ConnectionError, TimeoutError)):
        return ErrorCategory.STORAGE_UNAVAILABLE
    if isinstance(exception, PermissionError):
        return ErrorCategory.PERMISSION_DENIED
    if isinstance(exception, KeyError):
        return ErrorCategory.NOT_FOUND
    if isinstance(exception, ValueError):
        return ErrorCategory.VALIDATION_FAILED
    return ErrorCategory.UNKNOWN


_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION_FAILED: constants.HTTP_BAD_REQUEST,
    ErrorCategory.PERMISSION_DENIED: constants.HTTP_FORBIDDEN,
    ErrorCategory.NOT_FOUND: constants.HTTP_NOT_FOUND,
    ErrorCategory.DUPLICATE_RECORD: constants.HTTP_CONFLICT,
    ErrorCategory.STORAGE_UNAVAILABLE: constants.HTTP_SERVICE_UNAVAILABLE,
    ErrorCategory.UNKNOWN: constants.HTTP_SERVER_ERROR,
}


def status_code_for(exception: Exception) -> int:
    """HTTP status code for an exception raised by a service."""
    return _STATUS_BY_CATEGORY[classify_error(exception)]


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    error_str = str(exception).lower()
    category = classify_error(exception)

    if category == ErrorCategory.DUPLICATE_RECORD:
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE_RECORD,
            message="That record already exists.",
            suggestion="Reload to see the current state before trying again.",
            severity=ErrorSeverity.LOW,
        )

    if category == ErrorCategory.STORAGE_UNAVAILABLE or (
        category == ErrorCategory.UNKNOWN and _matches(error_str, "storage")
    ):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE_UNAVAILABLE,
            message="Your tasks could not be saved or loaded right now.",
            suggestion="Please try again in a moment.",
            severity=ErrorSeverity.HIGH,
        )

    if category == ErrorCategory.PERMISSION_DENIED:
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="You don't have permission for this action.",
            suggestion="You can only change your own tasks, routines and lists.",
            severity=ErrorSeverity.MEDIUM,
        )

    if category == ErrorCategory.NOT_FOUND:
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message="That item could not be found.",
            suggestion="It may have been deleted. Reload and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category == ErrorCategory.VALIDATION_FAILED:
        if "default wish list" in error_str:
            return ErrorResponse(
                code=ErrorCode.ERR_DEFAULT_WISH_LIST,
                message="The default wishlist cannot be deleted.",
                suggestion="Rename it or delete its items instead.",
                severity=ErrorSeverity.LOW,
            )
        if _matches(error_str, "time"):
            return ErrorResponse(
                code=ErrorCode.ERR_INVALID_TIME,
                message="That time is not valid.",
                suggestion="Use a 24-hour time like 07:30.",
                severity=ErrorSeverity.LOW,
            )
        if _matches(error_str, "date"):
            return ErrorResponse(
                code=ErrorCode.ERR_INVALID_DATE,
                message="That date is not valid.",
                suggestion="Use a calendar date like 2025-01-31.",
                severity=ErrorSeverity.LOW,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION_FAILED,
            message=str(exception) or "The request was not valid.",
            suggestion="Check the values you entered and try again.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
