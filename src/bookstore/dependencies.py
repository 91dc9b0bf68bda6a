"""Dependency injection for FastAPI routes."""

from typing import Annotated

from fastapi import Depends, Request

from .admin.service import BookDetailsService
from .books.service import BookService
from .cart.service import CartService
from .common.exceptions import AcquisitionError
from .core.database import DatabasePool
from .ratings.service import RatingService
from .users.service import UserService
from .wishlists.service import WishlistService


def get_pool(request: Request) -> DatabasePool:
    """Get the pool created by the application lifespan."""
    pool = getattr(request.app.state, "db", None)
    if pool is None:
        raise AcquisitionError("Database pool not initialized")
    return pool


PoolDep = Annotated[DatabasePool, Depends(get_pool)]


def get_book_service(pool: PoolDep) -> BookService:
    return BookService(pool)


def get_book_details_service(pool: PoolDep) -> BookDetailsService:
    return BookDetailsService(pool)


def get_user_service(pool: PoolDep) -> UserService:
    return UserService(pool)


def get_cart_service(pool: PoolDep) -> CartService:
    return CartService(pool)


def get_rating_service(pool: PoolDep) -> RatingService:
    return RatingService(pool)


def get_wishlist_service(pool: PoolDep) -> WishlistService:
    return WishlistService(pool)


# Dependency annotations for type hints
BookServiceDep = Annotated[BookService, Depends(get_book_service)]
BookDetailsServiceDep = Annotated[BookDetailsService, Depends(get_book_details_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
CartServiceDep = Annotated[CartService, Depends(get_cart_service)]
RatingServiceDep = Annotated[RatingService, Depends(get_rating_service)]
WishlistServiceDep = Annotated[WishlistService, Depends(get_wishlist_service)]
