"""Schemas for wishlists."""

from pydantic import BaseModel, ConfigDict, Field


class WishlistCreate(BaseModel):
    """Schema for creating a named wishlist."""
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=100)


class Wishlist(WishlistCreate):
    id: int


class WishlistBookAdd(BaseModel):
    book_id: int = Field(..., gt=0)
