"""Tests for wishlists."""

import asyncio
from unittest.mock import patch

import pytest

from bookstore.cart.service import CartService
from bookstore.common.exceptions import (
    ConflictException,
    NotFoundException,
    QueryError,
    ValidationException
)
from bookstore.wishlists.schemas import WishlistCreate
from bookstore.wishlists.service import MAX_WISHLISTS_PER_USER, WishlistService


@pytest.fixture
async def wishlist(pool, user):
    return await WishlistService(pool).create_wishlist(WishlistCreate(user_id=user.id, name="Summer"))


class TestWishlistService:
    """Test WishlistService operations."""

    @pytest.mark.asyncio
    async def test_create_wishlist(self, wishlist, user):
        assert wishlist.id == 1
        assert wishlist.user_id == user.id
        assert wishlist.name == "Summer"

    @pytest.mark.asyncio
    async def test_duplicate_name(self, pool, user, wishlist):
        with pytest.raises(ConflictException):
            await WishlistService(pool).create_wishlist(WishlistCreate(user_id=user.id, name="Summer"))

    @pytest.mark.asyncio
    async def test_wishlist_limit(self, pool, user):
        service = WishlistService(pool)
        for i in range(MAX_WISHLISTS_PER_USER):
            await service.create_wishlist(WishlistCreate(user_id=user.id, name=f"List {i}"))

        with pytest.raises(ValidationException):
            await service.create_wishlist(WishlistCreate(user_id=user.id, name="One too many"))

    @pytest.mark.asyncio
    async def test_wishlist_for_unknown_user(self, pool):
        with pytest.raises(NotFoundException):
            await WishlistService(pool).create_wishlist(WishlistCreate(user_id=999, name="Nope"))

    @pytest.mark.asyncio
    async def test_add_and_list_books(self, pool, wishlist, books):
        service = WishlistService(pool)
        await service.add_book(wishlist.id, books[2].id)
        result = await service.add_book(wishlist.id, books[0].id)

        assert [b.id for b in result] == [books[2].id, books[0].id]
        assert await service.list_books(wishlist.id) == result

    @pytest.mark.asyncio
    async def test_add_book_twice(self, pool, wishlist, books):
        service = WishlistService(pool)
        await service.add_book(wishlist.id, books[0].id)
        with pytest.raises(ConflictException):
            await service.add_book(wishlist.id, books[0].id)

    @pytest.mark.asyncio
    async def test_add_to_missing_wishlist_or_book(self, pool, wishlist, books):
        service = WishlistService(pool)
        with pytest.raises(NotFoundException):
            await service.add_book(999, books[0].id)
        with pytest.raises(NotFoundException):
            await service.add_book(wishlist.id, 999)

    @pytest.mark.asyncio
    async def test_remove_book(self, pool, user, wishlist, books):
        service = WishlistService(pool)
        await service.add_book(wishlist.id, books[0].id)

        await service.remove_book(wishlist.id, books[0].id)

        assert await service.list_books(wishlist.id) == []
        assert await CartService(pool).list_books(user.id) == []

    @pytest.mark.asyncio
    async def test_remove_missing_book(self, pool, wishlist, books):
        with pytest.raises(NotFoundException):
            await WishlistService(pool).remove_book(wishlist.id, books[0].id)

    @pytest.mark.asyncio
    async def test_move_to_cart(self, pool, user, wishlist, books):
        service = WishlistService(pool)
        await service.add_book(wishlist.id, books[1].id)

        await service.remove_book(wishlist.id, books[1].id, move_to_cart=True)

        assert await service.list_books(wishlist.id) == []
        cart = await CartService(pool).list_books(user.id)
        assert [item.id for item in cart] == [books[1].id]

    @pytest.mark.asyncio
    async def test_failed_move_keeps_book_in_wishlist(self, pool, user, wishlist, books):
        service = WishlistService(pool)
        await service.add_book(wishlist.id, books[1].id)

        with patch("bookstore.wishlists.service.add_to_cart", side_effect=QueryError("cart insert failed")):
            with pytest.raises(QueryError):
                await service.remove_book(wishlist.id, books[1].id, move_to_cart=True)

        assert [b.id for b in await service.list_books(wishlist.id)] == [books[1].id]
        assert await CartService(pool).list_books(user.id) == []
        assert pool.leased_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_creates_respect_limit(self, pool, user):
        service = WishlistService(pool)

        results = await asyncio.gather(*[
            service.create_wishlist(WishlistCreate(user_id=user.id, name=f"List {i}"))
            for i in range(MAX_WISHLISTS_PER_USER + 1)
        ], return_exceptions=True)

        rejected = [r for r in results if isinstance(r, Exception)]
        assert len(rejected) == 1
        assert isinstance(rejected[0], ValidationException)
        row = await pool.fetch_one("SELECT COUNT(*) AS n FROM wishlists WHERE user_id = ?", (user.id,))
        assert row["n"] == MAX_WISHLISTS_PER_USER
