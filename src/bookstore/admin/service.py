"""Book details administration: books by ISBN and authors."""

import logging
from typing import List

from ..books.schemas import Book, BookCreate
from ..books.service import BOOK_COLUMNS
from ..common.checks import conflict_on_duplicate
from ..common.exceptions import ConflictException, NotFoundException
from ..core.database import DatabasePool
from .schemas import Author, AuthorCreate

logger = logging.getLogger(__name__)


class BookDetailsService:
    """Service for creating and looking up books and authors."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def create_book(self, book: BookCreate) -> Book:
        """Create a book, rejecting duplicate ISBNs and unknown authors."""
        async with self.pool.transaction() as conn:
            existing = await conn.fetch_one(
                "SELECT id FROM books WHERE isbn = ?", (book.isbn,)
            )
            duplicate = f"A book with ISBN {book.isbn} already exists"
            if existing:
                raise ConflictException(duplicate)

            if book.author_id is not None:
                author = await conn.fetch_one(
                    "SELECT id FROM authors WHERE id = ?", (book.author_id,)
                )
                if not author:
                    raise NotFoundException(f"Author {book.author_id} not found")

            with conflict_on_duplicate(conn, duplicate):
                row = await conn.fetch_one(
                    f"""
                    INSERT INTO books (
                        isbn, title, description, price, author_id,
                        genre, publisher, year_published, copies_sold
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    RETURNING {BOOK_COLUMNS}
                    """,
                    (
                        book.isbn,
                        book.title,
                        book.description,
                        book.price,
                        book.author_id,
                        book.genre,
                        book.publisher,
                        book.year_published,
                        book.copies_sold
                    )
                )

        logger.info(f"Created book {row['id']} ({book.isbn})")
        return Book(**row)

    async def get_book_by_isbn(self, isbn: str) -> Book:
        normalized = isbn.replace("-", "").upper()
        row = await self.pool.fetch_one(
            f"SELECT {BOOK_COLUMNS} FROM books WHERE isbn = ?", (normalized,)
        )
        if not row:
            raise NotFoundException(f"Book with ISBN {isbn} not found")
        return Book(**row)

    async def create_author(self, author: AuthorCreate) -> Author:
        row = await self.pool.fetch_one(
            """
            INSERT INTO authors (first_name, last_name, biography, publisher)
            VALUES (?, ?, ?, ?)
            RETURNING id, first_name, last_name, biography, publisher
            """,
            (author.first_name, author.last_name, author.biography, author.publisher)
        )
        logger.info(f"Created author {row['id']} ({author.first_name} {author.last_name})")
        return Author(**row)

    async def books_by_author(self, author_id: int) -> List[Book]:
        async with self.pool.acquire() as conn:
            author = await conn.fetch_one(
                "SELECT id FROM authors WHERE id = ?", (author_id,)
            )
            if not author:
                raise NotFoundException(f"Author {author_id} not found")
            rows = await conn.run(
                f"SELECT {BOOK_COLUMNS} FROM books WHERE author_id = ? ORDER BY title",
                (author_id,)
            )
        return [Book(**row) for row in rows]
