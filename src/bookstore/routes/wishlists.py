"""Wishlist management routes."""

from typing import List

from fastapi import APIRouter, Query

from ..books.schemas import Book
from ..dependencies import WishlistServiceDep
from ..wishlists.schemas import Wishlist, WishlistBookAdd, WishlistCreate

router = APIRouter(prefix="/wishlists", tags=["wishlists"])


@router.post("", response_model=Wishlist, status_code=201)
async def create_wishlist(wishlist: WishlistCreate, wishlists: WishlistServiceDep) -> Wishlist:
    return await wishlists.create_wishlist(wishlist)


@router.post("/{wishlist_id}/books", response_model=List[Book], status_code=201)
async def add_book(
    wishlist_id: int,
    item: WishlistBookAdd,
    wishlists: WishlistServiceDep
) -> List[Book]:
    return await wishlists.add_book(wishlist_id, item.book_id)


@router.delete("/{wishlist_id}/books/{book_id}", status_code=204)
async def remove_book(
    wishlist_id: int,
    book_id: int,
    wishlists: WishlistServiceDep,
    move_to_cart: bool = Query(False, description="Move the book into the owner's cart")
) -> None:
    await wishlists.remove_book(wishlist_id, book_id, move_to_cart=move_to_cart)


@router.get("/{wishlist_id}/books", response_model=List[Book])
async def list_books(wishlist_id: int, wishlists: WishlistServiceDep) -> List[Book]:
    return await wishlists.list_books(wishlist_id)
