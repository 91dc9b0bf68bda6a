"""Ratings and comments domain."""

from .schemas import AverageRating, Comment, CommentCreate, Rating, RatingCreate
from .service import RatingService

__all__ = [
    "AverageRating",
    "Comment",
    "CommentCreate",
    "Rating",
    "RatingCreate",
    "RatingService"
]
