"""Bookstore schema creation.

The DDL is written once in a dialect-neutral subset of SQL; only the
identity column differs and is filled in from the driver.
"""

import logging
from typing import List

from ..common.exceptions import DatabaseException
from .database import DatabasePool

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS authors (
        id {pk},
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        biography TEXT,
        publisher TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS books (
        id {pk},
        isbn TEXT NOT NULL UNIQUE,
        title TEXT NOT NULL,
        description TEXT,
        price DOUBLE PRECISION NOT NULL CHECK (price >= 0),
        author_id INTEGER REFERENCES authors(id),
        genre TEXT,
        publisher TEXT,
        year_published INTEGER,
        copies_sold INTEGER NOT NULL DEFAULT 0 CHECK (copies_sold >= 0)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_books_genre ON books(genre)",
    "CREATE INDEX IF NOT EXISTS idx_books_publisher ON books(publisher)",
    "CREATE INDEX IF NOT EXISTS idx_books_author ON books(author_id)",
    """
    CREATE TABLE IF NOT EXISTS users (
        id {pk},
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        name TEXT,
        email TEXT,
        home_address TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS credit_cards (
        id {pk},
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        card_number TEXT NOT NULL,
        expiration_date TEXT NOT NULL,
        cardholder_name TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cart_items (
        id {pk},
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity > 0),
        added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (user_id, book_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ratings (
        id {pk},
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ratings_book ON ratings(book_id)",
    """
    CREATE TABLE IF NOT EXISTS comments (
        id {pk},
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        comment TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_comments_book ON comments(book_id)",
    """
    CREATE TABLE IF NOT EXISTS wishlists (
        id {pk},
        user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        UNIQUE (user_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS wishlist_items (
        id {pk},
        wishlist_id INTEGER NOT NULL REFERENCES wishlists(id) ON DELETE CASCADE,
        book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        UNIQUE (wishlist_id, book_id)
    )
    """,
]


def render_schema(identity_column: str) -> List[str]:
    return [statement.format(pk=identity_column) for statement in SCHEMA_STATEMENTS]


async def create_schema(pool: DatabasePool) -> None:
    """Create the bookstore tables if they don't exist."""
    statements = render_schema(pool.driver.identity_column)
    try:
        async with pool.transaction() as conn:
            for statement in statements:
                await conn.run(statement)
    except DatabaseException as e:
        logger.error(f"Schema creation failed: {e}")
        raise
    logger.info(f"Database schema created/verified ({len(statements)} statements)")
