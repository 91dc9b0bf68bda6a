"""Wishlists domain."""

from .schemas import Wishlist, WishlistBookAdd, WishlistCreate
from .service import MAX_WISHLISTS_PER_USER, WishlistService

__all__ = [
    "Wishlist",
    "WishlistBookAdd",
    "WishlistCreate",
    "MAX_WISHLISTS_PER_USER",
    "WishlistService"
]
