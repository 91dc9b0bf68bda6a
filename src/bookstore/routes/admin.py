"""Book details administration routes."""

from typing import List

from fastapi import APIRouter

from ..admin.schemas import Author, AuthorCreate
from ..books.schemas import Book, BookCreate
from ..dependencies import BookDetailsServiceDep

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/books", response_model=Book, status_code=201)
async def create_book(book: BookCreate, details: BookDetailsServiceDep) -> Book:
    return await details.create_book(book)


@router.get("/books/{isbn}", response_model=Book)
async def get_book(isbn: str, details: BookDetailsServiceDep) -> Book:
    return await details.get_book_by_isbn(isbn)


@router.post("/authors", response_model=Author, status_code=201)
async def create_author(author: AuthorCreate, details: BookDetailsServiceDep) -> Author:
    return await details.create_author(author)


@router.get("/authors/{author_id}/books", response_model=List[Book])
async def books_by_author(author_id: int, details: BookDetailsServiceDep) -> List[Book]:
    return await details.books_by_author(author_id)
