"""Pydantic v2 schemas for user profiles and credit cards."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EXPIRATION_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")


def _validate_email(v: Optional[str]) -> Optional[str]:
    if v is not None and not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email address")
    return v


class UserBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    home_address: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class UserCreate(UserBase):
    """Schema for creating a new user."""
    username: str
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must be 3-50 characters of letters, digits, '_', '.' or '-'"
            )
        return v


class UserUpdate(BaseModel):
    """Schema for updating a user.

    ``email`` is accepted only so that the service can reject it explicitly.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    password: Optional[str] = Field(None, min_length=8, max_length=128)
    name: Optional[str] = Field(None, max_length=255)
    home_address: Optional[str] = Field(None, max_length=500)
    email: Optional[str] = None


class User(UserBase):
    """User as returned by the API (never includes the password)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class CreditCardCreate(BaseModel):
    """Schema for attaching a credit card to a user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    card_number: str
    expiration_date: str = Field(..., description="MM/YY")
    cardholder_name: Optional[str] = Field(None, max_length=255)

    @field_validator("card_number")
    @classmethod
    def validate_card_number(cls, v: str) -> str:
        digits = v.replace(" ", "").replace("-", "")
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValueError("Card number must be 12-19 digits")
        return digits

    @field_validator("expiration_date")
    @classmethod
    def validate_expiration(cls, v: str) -> str:
        if not EXPIRATION_PATTERN.match(v):
            raise ValueError("Expiration date must be MM/YY")
        return v


class CreditCard(BaseModel):
    """Stored credit card with the number masked."""
    id: int
    user_id: int
    card_last_four: str
    expiration_date: str
    cardholder_name: Optional[str] = None
