"""Tests for shopping carts."""

import asyncio

import pytest

from bookstore.cart.service import CartService
from bookstore.common.exceptions import NotFoundException


class TestCartService:
    """Test CartService operations."""

    @pytest.mark.asyncio
    async def test_empty_cart(self, pool, user):
        service = CartService(pool)
        assert await service.list_books(user.id) == []

        subtotal = await service.subtotal(user.id)
        assert subtotal.subtotal == 0
        assert subtotal.item_count == 0

    @pytest.mark.asyncio
    async def test_add_book_returns_cart(self, pool, user, books):
        items = await CartService(pool).add_book(user.id, books[0].id)

        assert len(items) == 1
        assert items[0].id == books[0].id
        assert items[0].quantity == 1

    @pytest.mark.asyncio
    async def test_adding_same_book_increments_quantity(self, pool, user, books):
        service = CartService(pool)
        await service.add_book(user.id, books[2].id)
        items = await service.add_book(user.id, books[2].id)

        assert len(items) == 1
        assert items[0].quantity == 2

    @pytest.mark.asyncio
    async def test_subtotal(self, pool, user, books):
        service = CartService(pool)
        await service.add_book(user.id, books[0].id)
        await service.add_book(user.id, books[2].id)
        await service.add_book(user.id, books[2].id)

        subtotal = await service.subtotal(user.id)

        assert subtotal.subtotal == pytest.approx(51.00)
        assert subtotal.item_count == 3

    @pytest.mark.asyncio
    async def test_unknown_user_or_book(self, pool, user, books):
        service = CartService(pool)
        with pytest.raises(NotFoundException):
            await service.add_book(999, books[0].id)
        with pytest.raises(NotFoundException):
            await service.add_book(user.id, 999)
        with pytest.raises(NotFoundException):
            await service.subtotal(999)
        with pytest.raises(NotFoundException):
            await service.list_books(999)

    @pytest.mark.asyncio
    async def test_remove_book(self, pool, user, books):
        service = CartService(pool)
        await service.add_book(user.id, books[0].id)
        await service.add_book(user.id, books[1].id)

        await service.remove_book(user.id, books[0].id)

        assert [item.id for item in await service.list_books(user.id)] == [books[1].id]

    @pytest.mark.asyncio
    async def test_remove_book_not_in_cart(self, pool, user, books):
        with pytest.raises(NotFoundException):
            await CartService(pool).remove_book(user.id, books[0].id)

    @pytest.mark.asyncio
    async def test_concurrent_adds_accumulate(self, pool, user, books):
        service = CartService(pool)

        await asyncio.gather(*[service.add_book(user.id, books[1].id) for _ in range(5)])

        items = await service.list_books(user.id)
        assert [item.quantity for item in items] == [5]
        assert pool.leased_count == 0
