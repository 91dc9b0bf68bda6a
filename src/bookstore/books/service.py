"""Book browsing, sorting and publisher discounts."""

import logging
from typing import List, Optional

from ..core.database import DatabasePool
from .schemas import Book, DiscountRequest, DiscountResult, RatedBook

logger = logging.getLogger(__name__)

BOOK_COLUMNS = (
    "id, isbn, title, description, price, author_id, genre, "
    "publisher, year_published, copies_sold"
)
TOP_SELLER_LIMIT = 10


class BookService:
    """Service for read-mostly book queries."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def list_books(self, genre: Optional[str] = None) -> List[Book]:
        """List books, optionally filtered by genre (case-insensitive)."""
        if genre:
            rows = await self.pool.execute(
                f"SELECT {BOOK_COLUMNS} FROM books WHERE LOWER(genre) = LOWER(?) ORDER BY title",
                (genre,)
            )
        else:
            rows = await self.pool.execute(f"SELECT {BOOK_COLUMNS} FROM books ORDER BY title")
        return [Book(**row) for row in rows]

    async def top_sellers(self, limit: int = TOP_SELLER_LIMIT) -> List[Book]:
        rows = await self.pool.execute(
            f"SELECT {BOOK_COLUMNS} FROM books ORDER BY copies_sold DESC, title LIMIT ?",
            (limit,)
        )
        return [Book(**row) for row in rows]

    async def books_with_min_rating(self, min_rating: float) -> List[RatedBook]:
        """Books whose average rating is at least ``min_rating``."""
        columns = ", ".join(f"b.{col.strip()}" for col in BOOK_COLUMNS.split(","))
        rows = await self.pool.execute(
            f"""
            SELECT {columns}, AVG(r.rating) AS average_rating
            FROM books b
            JOIN ratings r ON r.book_id = b.id
            GROUP BY b.id
            HAVING AVG(r.rating) >= ?
            ORDER BY average_rating DESC, b.title
            """,
            (min_rating,)
        )
        return [RatedBook(**row) for row in rows]

    async def discount_publisher(self, request: DiscountRequest) -> DiscountResult:
        """Discount every book of a publisher by a percentage.

        Prices are rounded to cents, so the rows are rewritten one by one
        inside a single transaction.
        """
        factor = 1 - request.discount_percent / 100
        async with self.pool.transaction() as conn:
            rows = await conn.run(
                "SELECT id, price FROM books WHERE publisher = ?",
                (request.publisher,)
            )
            for row in rows:
                await conn.run(
                    "UPDATE books SET price = ? WHERE id = ?",
                    (round(row["price"] * factor, 2), row["id"])
                )

        logger.info(
            f"Applied {request.discount_percent}% discount to {len(rows)} "
            f"book(s) from {request.publisher}"
        )
        return DiscountResult(
            publisher=request.publisher,
            discount_percent=request.discount_percent,
            books_updated=len(rows)
        )
