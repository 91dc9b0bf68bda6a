"""Pydantic v2 schemas for the books domain."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BookBase(BaseModel):
    """Fields shared by book input and output."""
    model_config = ConfigDict(str_strip_whitespace=True)

    isbn: str = Field(..., min_length=10, max_length=17)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    author_id: Optional[int] = Field(None, gt=0)
    genre: Optional[str] = Field(None, max_length=100)
    publisher: Optional[str] = Field(None, max_length=255)
    year_published: Optional[int] = Field(None, ge=0, le=9999)
    copies_sold: int = Field(default=0, ge=0)

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str) -> str:
        digits = v.replace("-", "")
        if len(digits) not in (10, 13) or not digits[:-1].isdigit():
            raise ValueError("ISBN must have 10 or 13 digits")
        if not (digits[-1].isdigit() or (len(digits) == 10 and digits[-1] in "Xx")):
            raise ValueError("Invalid ISBN check digit")
        return digits.upper()


class BookCreate(BookBase):
    """Schema for creating a new book."""
    pass


class Book(BookBase):
    """Book as stored in database."""
    model_config = ConfigDict(from_attributes=True)

    id: int


class RatedBook(Book):
    """Book with its average rating."""
    average_rating: float


class DiscountRequest(BaseModel):
    """Percentage discount applied to every book of a publisher."""
    model_config = ConfigDict(str_strip_whitespace=True)

    publisher: str = Field(..., min_length=1, max_length=255)
    discount_percent: float = Field(..., gt=0, lt=100)


class DiscountResult(BaseModel):
    publisher: str
    discount_percent: float
    books_updated: int
