"""
Pydantic schema definitions for the catalog module.

``BookCreate`` is the body accepted when a book is created or replaced.
``Book`` is what the API returns: the stored fields plus ``price``, a
display-only string asked from the local model on every read. The price
is never written to the database and is ``None`` whenever the model could
not produce one.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BookStatus(str, Enum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    MAINTENANCE = "maintenance"


class BookCreate(BaseModel):
    title: str = Field(..., max_length=255)
    author: str = Field(..., max_length=255)
    isbn: Optional[str] = Field(default=None, max_length=32)
    genre: Optional[str] = Field(default=None, max_length=100)
    pages: Optional[int] = Field(default=None, gt=0)
    status: BookStatus = BookStatus.AVAILABLE

    @field_validator("title", "author")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class Book(BookCreate):
    """A stored book as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    # Filled from the local model on reads; never persisted.
    price: Optional[str] = None


class BookStatusUpdate(BaseModel):
    status: BookStatus


class PriceRequest(BaseModel):
    title: str
    author: str


class PriceQuote(BaseModel):
    title: str
    author: str
    price: Optional[str] = None


class BookStats(BaseModel):
    """Counts per status, keyed the way the dashboard front-end reads them."""

    model_config = ConfigDict(populate_by_name=True)

    total_books: int = Field(alias="totalBooks")
    available_books: int = Field(alias="availableBooks")
    borrowed_books: int = Field(alias="borrowedBooks")
    maintenance_books: int = Field(alias="maintenanceBooks")
