"""Rating and commenting routes."""

from typing import List

from fastapi import APIRouter

from ..dependencies import RatingServiceDep
from ..ratings.schemas import AverageRating, Comment, CommentCreate, Rating, RatingCreate

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=Rating, status_code=201)
async def create_rating(rating: RatingCreate, ratings: RatingServiceDep) -> Rating:
    return await ratings.create_rating(rating)


@router.post("/comments", response_model=Comment, status_code=201)
async def create_comment(comment: CommentCreate, ratings: RatingServiceDep) -> Comment:
    return await ratings.create_comment(comment)


@router.get("/books/{book_id}/comments", response_model=List[Comment])
async def list_comments(book_id: int, ratings: RatingServiceDep) -> List[Comment]:
    return await ratings.list_comments(book_id)


@router.get("/books/{book_id}/average", response_model=AverageRating)
async def average_rating(book_id: int, ratings: RatingServiceDep) -> AverageRating:
    return await ratings.average_rating(book_id)
