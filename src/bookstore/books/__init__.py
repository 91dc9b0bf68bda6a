"""Books domain: browsing, sorting and discounts."""

from .schemas import Book, BookCreate, DiscountRequest, DiscountResult, RatedBook
from .service import BookService

__all__ = [
    "Book",
    "BookCreate",
    "DiscountRequest",
    "DiscountResult",
    "RatedBook",
    "BookService"
]
