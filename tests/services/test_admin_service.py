"""Tests for book details administration."""

import pytest

from bookstore.admin.schemas import AuthorCreate
from bookstore.admin.service import BookDetailsService
from bookstore.books.schemas import BookCreate
from bookstore.common.exceptions import ConflictException, NotFoundException


class TestBookDetailsService:
    """Test creating and looking up books and authors."""

    @pytest.mark.asyncio
    async def test_create_book_assigns_id(self, pool, books):
        assert [b.id for b in books] == [1, 2, 3]
        assert books[0].author_id is not None
        assert books[2].author_id is None

    @pytest.mark.asyncio
    async def test_duplicate_isbn_conflicts(self, pool, books):
        with pytest.raises(ConflictException):
            await BookDetailsService(pool).create_book(BookCreate(
                isbn="978-0441478125",
                title="Duplicate",
                price=1.00
            ))

        row = await pool.fetch_one("SELECT COUNT(*) AS n FROM books")
        assert row["n"] == 3

    @pytest.mark.asyncio
    async def test_unknown_author_not_found(self, pool):
        with pytest.raises(NotFoundException):
            await BookDetailsService(pool).create_book(BookCreate(
                isbn="0306406152",
                title="Orphan",
                price=5.00,
                author_id=999
            ))

    @pytest.mark.asyncio
    async def test_get_book_by_isbn_accepts_hyphens(self, pool, books):
        book = await BookDetailsService(pool).get_book_by_isbn("978-0-547-77374-2")
        assert book.title == "A Wizard of Earthsea"

    @pytest.mark.asyncio
    async def test_get_missing_book(self, pool):
        with pytest.raises(NotFoundException):
            await BookDetailsService(pool).get_book_by_isbn("9999999999")

    @pytest.mark.asyncio
    async def test_create_author(self, pool):
        author = await BookDetailsService(pool).create_author(AuthorCreate(
            first_name="  Brandon ",
            last_name="Sanderson",
            publisher="Tor"
        ))
        assert author.id == 1
        assert author.first_name == "Brandon"
        assert author.biography is None

    @pytest.mark.asyncio
    async def test_books_by_author(self, pool, author, books):
        result = await BookDetailsService(pool).books_by_author(author.id)
        assert [b.title for b in result] == ["A Wizard of Earthsea", "The Left Hand of Darkness"]

    @pytest.mark.asyncio
    async def test_books_by_unknown_author(self, pool):
        with pytest.raises(NotFoundException):
            await BookDetailsService(pool).books_by_author(42)


class TestBookSchema:
    """Test ISBN validation."""

    def test_isbn_is_normalized(self):
        book = BookCreate(isbn="0-306-40615-x", title="T", price=1)
        assert book.isbn == "030640615X"

    @pytest.mark.parametrize("isbn", ["12345", "97804414781", "abcdefghij", "978044147812X"])
    def test_invalid_isbn(self, isbn):
        with pytest.raises(ValueError):
            BookCreate(isbn=isbn, title="T", price=1)

    def test_negative_price(self):
        with pytest.raises(ValueError):
            BookCreate(isbn="0306406152", title="T", price=-1)
