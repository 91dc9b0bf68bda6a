"""Shopping cart routes."""

from typing import List

from fastapi import APIRouter

from ..cart.schemas import CartAdd, CartItem, CartSubtotal
from ..dependencies import CartServiceDep

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/{user_id}/subtotal", response_model=CartSubtotal)
async def get_subtotal(user_id: int, cart: CartServiceDep) -> CartSubtotal:
    return await cart.subtotal(user_id)


@router.post("", response_model=List[CartItem], status_code=201)
async def add_book(item: CartAdd, cart: CartServiceDep) -> List[CartItem]:
    """Add a book to a user's cart and return the updated cart."""
    return await cart.add_book(item.user_id, item.book_id)


@router.get("/{user_id}", response_model=List[CartItem])
async def list_books(user_id: int, cart: CartServiceDep) -> List[CartItem]:
    return await cart.list_books(user_id)


@router.delete("/{user_id}/books/{book_id}", status_code=204)
async def remove_book(user_id: int, book_id: int, cart: CartServiceDep) -> None:
    await cart.remove_book(user_id, book_id)
