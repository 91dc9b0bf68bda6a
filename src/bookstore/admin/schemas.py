"""Schemas for administering book details and authors."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthorCreate(BaseModel):
    """Schema for creating a new author."""
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    biography: Optional[str] = None
    publisher: Optional[str] = Field(None, max_length=255)


class Author(AuthorCreate):
    """Author as stored in database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
