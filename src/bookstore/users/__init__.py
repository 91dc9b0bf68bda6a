"""Users domain for profile management."""

from .schemas import CreditCard, CreditCardCreate, User, UserCreate, UserUpdate
from .service import UserService

__all__ = [
    "CreditCard",
    "CreditCardCreate",
    "User",
    "UserCreate",
    "UserUpdate",
    "UserService"
]
