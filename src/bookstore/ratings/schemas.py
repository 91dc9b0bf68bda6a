"""Schemas for ratings and comments."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingCreate(BaseModel):
    """A 1-5 star rating of a book by a user."""
    user_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)


class Rating(RatingCreate):
    id: int
    created_at: datetime


class CommentCreate(BaseModel):
    """A comment on a book by a user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)
    comment: str = Field(..., min_length=1, max_length=2000)


class Comment(CommentCreate):
    id: int
    created_at: datetime


class AverageRating(BaseModel):
    book_id: int
    average_rating: Optional[float] = None
    rating_count: int = 0
