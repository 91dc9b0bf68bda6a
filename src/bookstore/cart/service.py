"""Shopping cart service."""

import logging
from typing import List

from ..books.service import BOOK_COLUMNS
from ..common.checks import ensure_book, ensure_user
from ..common.exceptions import NotFoundException
from ..core.database import ConnectionLease, DatabasePool
from .schemas import CartItem, CartSubtotal

logger = logging.getLogger(__name__)

CART_BOOK_COLUMNS = ", ".join(f"b.{col.strip()}" for col in BOOK_COLUMNS.split(","))

ADD_TO_CART_SQL = """
    INSERT INTO cart_items (user_id, book_id, quantity)
    VALUES (?, ?, 1)
    ON CONFLICT (user_id, book_id) DO UPDATE SET quantity = cart_items.quantity + 1
"""


async def add_to_cart(conn: ConnectionLease, user_id: int, book_id: int) -> None:
    """Add a copy of a book on an already leased connection."""
    await conn.run(ADD_TO_CART_SQL, (user_id, book_id))


class CartService:
    """Service for managing shopping carts."""

    def __init__(self, pool: DatabasePool):
        self.pool = pool

    async def subtotal(self, user_id: int) -> CartSubtotal:
        async with self.pool.acquire() as conn:
            await ensure_user(conn, user_id)
            row = await conn.fetch_one(
                """
                SELECT COALESCE(SUM(b.price * c.quantity), 0) AS subtotal,
                       COALESCE(SUM(c.quantity), 0) AS item_count
                FROM cart_items c
                JOIN books b ON b.id = c.book_id
                WHERE c.user_id = ?
                """,
                (user_id,)
            )
        return CartSubtotal(
            user_id=user_id,
            subtotal=round(float(row["subtotal"]), 2),
            item_count=int(row["item_count"])
        )

    async def add_book(self, user_id: int, book_id: int) -> List[CartItem]:
        async with self.pool.transaction() as conn:
            await ensure_user(conn, user_id)
            await ensure_book(conn, book_id)
            await add_to_cart(conn, user_id, book_id)

        logger.info(f"Added book {book_id} to cart of user {user_id}")
        return await self.list_books(user_id)

    async def list_books(self, user_id: int) -> List[CartItem]:
        async with self.pool.acquire() as conn:
            await ensure_user(conn, user_id)
            rows = await conn.run(
                f"""
                SELECT {CART_BOOK_COLUMNS}, c.quantity
                FROM cart_items c
                JOIN books b ON b.id = c.book_id
                WHERE c.user_id = ?
                ORDER BY c.added_at, c.id
                """,
                (user_id,)
            )
        return [CartItem(**row) for row in rows]

    async def remove_book(self, user_id: int, book_id: int) -> None:
        rows = await self.pool.execute(
            "DELETE FROM cart_items WHERE user_id = ? AND book_id = ? RETURNING id",
            (user_id, book_id)
        )
        if not rows:
            raise NotFoundException(f"Book {book_id} is not in the cart of user {user_id}")
        logger.info(f"Removed book {book_id} from cart of user {user_id}")
