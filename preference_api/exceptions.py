"""
Custom Exception Classes for the Preference Service

This module defines custom exceptions for consistent error responses
across the application. Each exception carries a machine-readable
``error_code`` that clients can use for localized messages.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    PREFERENCE_INVALID = "PREFERENCE_INVALID"
    PREFERENCE_STORAGE_ERROR = "PREFERENCE_STORAGE_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PreferenceAPIError(Exception):
    """Base exception class for all service exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthenticationError(PreferenceAPIError):
    """Raised when authentication fails"""

    def __init__(self, message: str = "Authentication failed", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=ErrorCode.AUTH_FAILED,
            details=details,
        )


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(PreferenceAPIError):
    """Raised when input validation fails"""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status_code, error_code=error_code, details=error_details)


class PreferenceValidationError(ValidationError):
    """Raised when a preference update body does not match the preference shape"""

    def __init__(self, errors: list[dict[str, Any]], message: str = "Invalid preference update"):
        super().__init__(
            message=message,
            details={"validation_errors": errors},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=ErrorCode.PREFERENCE_INVALID,
        )
        self.errors = errors


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(PreferenceAPIError):
    """Raised when a database operation fails"""

    def __init__(
        self,
        message: str = "A database error occurred",
        operation: str | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
    ):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status_code, error_code=error_code, details=details)
        self.operation = operation


class PreferenceStorageError(DatabaseError):
    """Raised when the durable preference store cannot be read or written"""

    def __init__(self, operation: str, message: str = "Preference storage is unavailable"):
        super().__init__(
            message=message,
            operation=operation,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code=ErrorCode.PREFERENCE_STORAGE_ERROR,
        )
