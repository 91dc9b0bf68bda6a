"""Shopping cart domain."""

from .schemas import CartAdd, CartItem, CartSubtotal
from .service import CartService

__all__ = ["CartAdd", "CartItem", "CartSubtotal", "CartService"]
