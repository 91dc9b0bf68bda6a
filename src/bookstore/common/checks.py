"""Existence and uniqueness checks shared by the domain services."""

from contextlib import contextmanager
from typing import Iterator

from ..core.database import ConnectionLease
from .exceptions import ConflictException, NotFoundException, QueryError


async def ensure_user(conn: ConnectionLease, user_id: int) -> None:
    if not await conn.fetch_one("SELECT id FROM users WHERE id = ?", (user_id,)):
        raise NotFoundException(f"User {user_id} not found")


async def ensure_book(conn: ConnectionLease, book_id: int) -> None:
    if not await conn.fetch_one("SELECT id FROM books WHERE id = ?", (book_id,)):
        raise NotFoundException(f"Book {book_id} not found")


@contextmanager
def conflict_on_duplicate(conn: ConnectionLease, message: str) -> Iterator[None]:
    """Raise ``ConflictException`` when a statement in the block hits a unique constraint.

    Services check for duplicates before inserting; this covers a concurrent
    insert that lands between the check and the write.
    """
    try:
        yield
    except QueryError as e:
        if conn.is_unique_violation(e):
            raise ConflictException(message) from e
        raise
