"""Book browsing and sorting routes."""

from typing import List, Optional

from fastapi import APIRouter, Path, Query

from ..books.schemas import Book, DiscountRequest, DiscountResult, RatedBook
from ..dependencies import BookServiceDep

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=List[Book])
async def list_books(
    books: BookServiceDep,
    genre: Optional[str] = Query(None, description="Filter by genre")
) -> List[Book]:
    """List books, optionally by genre."""
    return await books.list_books(genre=genre)


@router.get("/top-sellers", response_model=List[Book])
async def top_sellers(books: BookServiceDep) -> List[Book]:
    """Top 10 books by copies sold."""
    return await books.top_sellers()


@router.get("/rating/{min_rating}", response_model=List[RatedBook])
async def books_by_rating(
    books: BookServiceDep,
    min_rating: float = Path(..., ge=1, le=5)
) -> List[RatedBook]:
    """Books with an average rating of at least ``min_rating``."""
    return await books.books_with_min_rating(min_rating)


@router.patch("/discount", response_model=DiscountResult)
async def discount_publisher(
    request: DiscountRequest,
    books: BookServiceDep
) -> DiscountResult:
    """Discount all books of a publisher by a percentage."""
    return await books.discount_publisher(request)
