"""Core infrastructure for the bookstore API."""

from .database import (
    ConnectionLease,
    DatabasePool,
    LeaseState,
    create_pool,
    transaction
)
from .drivers import DatabaseDriver, PostgresDriver, SQLiteDriver, create_driver
from .schema import create_schema

__all__ = [
    "ConnectionLease",
    "DatabasePool",
    "LeaseState",
    "create_pool",
    "transaction",
    "DatabaseDriver",
    "PostgresDriver",
    "SQLiteDriver",
    "create_driver",
    "create_schema"
]
