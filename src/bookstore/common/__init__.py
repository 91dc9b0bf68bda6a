"""Common utilities and exceptions for the bookstore API."""

from .exceptions import (
    BaseAppException,
    NotFoundException,
    ConflictException,
    ValidationException,
    DatabaseException,
    AcquisitionError,
    QueryError,
    TransactionError,
    ConnectionReleasedError
)

__all__ = [
    "BaseAppException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "DatabaseException",
    "AcquisitionError",
    "QueryError",
    "TransactionError",
    "ConnectionReleasedError"
]
