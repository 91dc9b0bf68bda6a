"""Wishlist service.

A user may keep up to ``MAX_WISHLISTS_PER_USER`` wishlists with distinct
names. Books can be moved from a wishlist into the user's cart atomically.
"""

import logging
from typing import Any, Dict, List

from ..books.schemas import Book
from ..books.service import BOOK_COLUMNS
from ..cart.service import add_to_cart
from ..common.checks import conflict_on_duplicate, ensure_book, ensure_user
from ..common.exceptions import ConflictException, NotFoundException, ValidationException
from ..core.database import ConnectionLease, DatabasePool
from .schemas import Wishlist, WishlistCreate

logger = logging.getLogger(__name__)

MAX_WISHLISTS_PER_USER = 3

WISHLIST_BOOK_COLUMNS = ", ".join(f"b.{col.strip()}" for col in BOOK_COLUMNS.split(","))


async def _get_wishlist(conn: ConnectionLease, wishlist_id: int) -> Dict[str, Any]:
    row = await conn.fetch_one(
        "SELECT id, user_id, name FROM wishlists WHERE id = ?", (wishlist_id,)
    )
    if not row:
        raise NotFoundException(f"Wishlist {wishlist_id} not found")
    return row


class WishlistService:
    """Service for managing wishlists."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def create_wishlist(self, wishlist: WishlistCreate) -> Wishlist:
        async with self.pool.transaction() as conn:
            await ensure_user(conn, wishlist.user_id)

            rows = await conn.run(
                "SELECT name FROM wishlists WHERE user_id = ?", (wishlist.user_id,)
            )
            duplicate = f"User {wishlist.user_id} already has a wishlist named '{wishlist.name}'"
            if any(row["name"] == wishlist.name for row in rows):
                raise ConflictException(duplicate)
            if len(rows) >= MAX_WISHLISTS_PER_USER:
                raise ValidationException(
                    f"A user can have at most {MAX_WISHLISTS_PER_USER} wishlists"
                )

            with conflict_on_duplicate(conn, duplicate):
                row = await conn.fetch_one(
                    "INSERT INTO wishlists (user_id, name) VALUES (?, ?) RETURNING id, user_id, name",
                    (wishlist.user_id, wishlist.name)
                )

        logger.info(f"Created wishlist {row['id']} for user {wishlist.user_id}")
        return Wishlist(**row)

    async def add_book(self, wishlist_id: int, book_id: int) -> List[Book]:
        async with self.pool.transaction() as conn:
            await _get_wishlist(conn, wishlist_id)
            await ensure_book(conn, book_id)
            existing = await conn.fetch_one(
                "SELECT id FROM wishlist_items WHERE wishlist_id = ? AND book_id = ?",
                (wishlist_id, book_id)
            )
            duplicate = f"Book {book_id} is already in wishlist {wishlist_id}"
            if existing:
                raise ConflictException(duplicate)
            with conflict_on_duplicate(conn, duplicate):
                await conn.run(
                    "INSERT INTO wishlist_items (wishlist_id, book_id) VALUES (?, ?)",
                    (wishlist_id, book_id)
                )

        logger.info(f"Added book {book_id} to wishlist {wishlist_id}")
        return await self.list_books(wishlist_id)

    async def remove_book(
        self,
        wishlist_id: int,
        book_id: int,
        move_to_cart: bool = False
    ) -> None:
        """Remove a book from a wishlist, optionally moving it to the cart.

        The delete and the cart insert commit together or not at all.
        """
        async with self.pool.transaction() as conn:
            wishlist = await _get_wishlist(conn, wishlist_id)
            deleted = await conn.run(
                "DELETE FROM wishlist_items WHERE wishlist_id = ? AND book_id = ? RETURNING id",
                (wishlist_id, book_id)
            )
            if not deleted:
                raise NotFoundException(f"Book {book_id} is not in wishlist {wishlist_id}")
            if move_to_cart:
                await add_to_cart(conn, wishlist["user_id"], book_id)

        if move_to_cart:
            logger.info(f"Moved book {book_id} from wishlist {wishlist_id} to cart")
        else:
            logger.info(f"Removed book {book_id} from wishlist {wishlist_id}")

    async def list_books(self, wishlist_id: int) -> List[Book]:
        async with self.pool.acquire() as conn:
            await _get_wishlist(conn, wishlist_id)
            rows = await conn.run(
                f"""
                SELECT {WISHLIST_BOOK_COLUMNS}
                FROM wishlist_items w
                JOIN books b ON b.id = w.book_id
                WHERE w.wishlist_id = ?
                ORDER BY w.id
                """,
                (wishlist_id,)
            )
        return [Book(**row) for row in rows]
