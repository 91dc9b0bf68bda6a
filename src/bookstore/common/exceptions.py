"""Custom exceptions for the bookstore API."""

from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(BaseAppException):
    """Raised when a requested resource does not exist."""
    status_code = 404


class ConflictException(BaseAppException):
    """Raised when a write collides with existing data."""
    status_code = 409


class ValidationException(BaseAppException):
    """Raised when validation fails."""
    status_code = 400


class DatabaseException(BaseAppException):
    """Raised when database operations fail.

    ``cause`` holds the underlying driver error, when there is one.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.cause = cause


class AcquisitionError(DatabaseException):
    """Raised when a connection cannot be obtained from the pool."""
    status_code = 503


class QueryError(DatabaseException):
    """Raised when the database rejects a statement or it fails mid-flight."""

    def __init__(
        self,
        message: str,
        statement: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, cause=cause, details=details)
        self.statement = statement


class TransactionError(DatabaseException):
    """Raised when begin, commit or rollback fails or is called out of order."""
    pass


class ConnectionReleasedError(DatabaseException):
    """Raised when a lease is used after it was returned to the pool."""
    pass
