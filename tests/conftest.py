"""Pytest configuration and shared fixtures for the test suite."""

import sys
from pathlib import Path

# Get paths
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"

# Add src before any test imports so "bookstore.*" resolves without install
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

import pytest

from bookstore.admin.schemas import AuthorCreate
from bookstore.admin.service import BookDetailsService
from bookstore.books.schemas import BookCreate
from bookstore.core.database import DatabasePool
from bookstore.core.drivers import SQLiteDriver
from bookstore.core.schema import create_schema
from bookstore.users.schemas import UserCreate
from bookstore.users.service import UserService


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
async def pool(db_path):
    """Pool over a fresh SQLite database with the bookstore schema."""
    pool = DatabasePool(SQLiteDriver(str(db_path)), max_connections=5)
    await create_schema(pool)
    yield pool
    if not pool.closed:
        await pool.shutdown()


@pytest.fixture
async def author(pool):
    return await BookDetailsService(pool).create_author(AuthorCreate(
        first_name="Ursula",
        last_name="Le Guin",
        biography="Author of Earthsea",
        publisher="Ace Books"
    ))


@pytest.fixture
async def books(pool, author):
    """Three books: two from Ace Books, one from Tor."""
    details = BookDetailsService(pool)
    return [
        await details.create_book(BookCreate(
            isbn="9780441478125",
            title="The Left Hand of Darkness",
            price=20.00,
            author_id=author.id,
            genre="Science Fiction",
            publisher="Ace Books",
            year_published=1969,
            copies_sold=500
        )),
        await details.create_book(BookCreate(
            isbn="9780547773742",
            title="A Wizard of Earthsea",
            price=10.00,
            author_id=author.id,
            genre="Fantasy",
            publisher="Ace Books",
            year_published=1968,
            copies_sold=900
        )),
        await details.create_book(BookCreate(
            isbn="9780765326355",
            title="The Way of Kings",
            price=15.50,
            genre="Fantasy",
            publisher="Tor",
            year_published=2010,
            copies_sold=700
        )),
    ]


@pytest.fixture
async def user(pool):
    return await UserService(pool).create_user(UserCreate(
        username="reader1",
        password="correct horse",
        name="Rita Reader",
        email="rita@example.com",
        home_address="1 Library Lane"
    ))
