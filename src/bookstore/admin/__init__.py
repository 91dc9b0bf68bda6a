"""Admin domain for book details and authors."""

from .schemas import Author, AuthorCreate
from .service import BookDetailsService

__all__ = ["Author", "AuthorCreate", "BookDetailsService"]
