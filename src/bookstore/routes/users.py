"""Profile management routes."""

from fastapi import APIRouter

from ..dependencies import UserServiceDep
from ..users.schemas import CreditCard, CreditCardCreate, User, UserCreate, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=User, status_code=201)
async def create_user(user: UserCreate, users: UserServiceDep) -> User:
    return await users.create_user(user)


@router.get("/{username}", response_model=User)
async def get_user(username: str, users: UserServiceDep) -> User:
    return await users.get_user(username)


@router.put("/{username}", response_model=User)
async def update_user(username: str, update: UserUpdate, users: UserServiceDep) -> User:
    """Update a user's profile; the email address cannot change."""
    return await users.update_user(username, update)


@router.post("/{username}/credit-cards", response_model=CreditCard, status_code=201)
async def add_credit_card(
    username: str,
    card: CreditCardCreate,
    users: UserServiceDep
) -> CreditCard:
    return await users.add_credit_card(username, card)
