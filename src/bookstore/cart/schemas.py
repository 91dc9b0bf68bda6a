"""Schemas for shopping carts."""

from pydantic import BaseModel, Field

from ..books.schemas import Book


class CartAdd(BaseModel):
    """Add one copy of a book to a user's cart."""
    user_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)


class CartItem(Book):
    """Book in a cart with the number of copies."""
    quantity: int = Field(..., gt=0)


class CartSubtotal(BaseModel):
    user_id: int
    subtotal: float
    item_count: int
