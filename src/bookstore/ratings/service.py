"""Rating and commenting service."""

import logging
from typing import List

from ..common.checks import ensure_book, ensure_user
from ..core.database import DatabasePool
from .schemas import AverageRating, Comment, CommentCreate, Rating, RatingCreate

logger = logging.getLogger(__name__)


class RatingService:
    """Service for book ratings and comments."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def create_rating(self, rating: RatingCreate) -> Rating:
        async with self.pool.transaction() as conn:
            await ensure_user(conn, rating.user_id)
            await ensure_book(conn, rating.book_id)
            row = await conn.fetch_one(
                """
                INSERT INTO ratings (user_id, book_id, rating)
                VALUES (?, ?, ?)
                RETURNING id, user_id, book_id, rating, created_at
                """,
                (rating.user_id, rating.book_id, rating.rating)
            )

        logger.info(f"User {rating.user_id} rated book {rating.book_id}: {rating.rating}")
        return Rating(**row)

    async def create_comment(self, comment: CommentCreate) -> Comment:
        async with self.pool.transaction() as conn:
            await ensure_user(conn, comment.user_id)
            await ensure_book(conn, comment.book_id)
            row = await conn.fetch_one(
                """
                INSERT INTO comments (user_id, book_id, comment)
                VALUES (?, ?, ?)
                RETURNING id, user_id, book_id, comment, created_at
                """,
                (comment.user_id, comment.book_id, comment.comment)
            )

        logger.info(f"User {comment.user_id} commented on book {comment.book_id}")
        return Comment(**row)

    async def list_comments(self, book_id: int) -> List[Comment]:
        async with self.pool.acquire() as conn:
            await ensure_book(conn, book_id)
            rows = await conn.run(
                """
                SELECT id, user_id, book_id, comment, created_at
                FROM comments
                WHERE book_id = ?
                ORDER BY created_at, id
                """,
                (book_id,)
            )
        return [Comment(**row) for row in rows]

    async def average_rating(self, book_id: int) -> AverageRating:
        async with self.pool.acquire() as conn:
            await ensure_book(conn, book_id)
            row = await conn.fetch_one(
                "SELECT AVG(rating) AS average_rating, COUNT(*) AS rating_count "
                "FROM ratings WHERE book_id = ?",
                (book_id,)
            )

        average = row["average_rating"]
        return AverageRating(
            book_id=book_id,
            average_rating=round(float(average), 2) if average is not None else None,
            rating_count=int(row["rating_count"])
        )
