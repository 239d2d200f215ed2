"""
Request models for the catalog services.

Field names follow the snake_case payloads of the catalog API.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthorRequest(BaseModel):
    """Create an author."""

    model_config = ConfigDict(extra="ignore")

    full_name: str = Field(
        ..., description="Author's full name", min_length=1, max_length=200
    )

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("Full name must not be blank")
        return v.strip()


class BookRequest(BaseModel):
    """Create a book with its detail, or change its price."""

    model_config = ConfigDict(extra="ignore")

    author_id: Optional[int] = Field(None, description="Author of the book", gt=0)
    title: Optional[str] = Field(
        None, description="The book title", min_length=1, max_length=300
    )
    price: int = Field(..., description="The book price", ge=0)
    page: Optional[int] = Field(None, description="Number of pages", gt=0)
    weight: Optional[int] = Field(None, description="Weight in grams", gt=0)

    def require_new_book_fields(self) -> None:
        """
        Ensure every field needed to create a book is present.

        Raises:
            ValueError: Naming the missing fields
        """
        missing = [
            name
            for name in ("author_id", "title", "page", "weight")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"Missing fields for a new book: {', '.join(missing)}")


class TransactionDetailRequest(BaseModel):
    """One requested book line."""

    model_config = ConfigDict(extra="ignore")

    book_id: int = Field(..., description="Book to buy", gt=0)
    qty: int = Field(..., description="Quantity", gt=0)


class TransactionRequest(BaseModel):
    """Create a transaction."""

    model_config = ConfigDict(extra="ignore")

    customer_name: str = Field(
        ..., description="Customer's name", min_length=1, max_length=200
    )
    details: List[TransactionDetailRequest] = Field(
        ..., description="Requested book lines", min_length=1
    )

    @field_validator("details")
    @classmethod
    def validate_unique_books(
        cls, v: List[TransactionDetailRequest]
    ) -> List[TransactionDetailRequest]:
        """A book may appear on a single line only; the line key is (transaction, book)."""
        book_ids = [line.book_id for line in v]
        duplicates = sorted({book_id for book_id in book_ids if book_ids.count(book_id) > 1})
        if duplicates:
            raise ValueError(
                f"Each book may appear once per transaction, repeated: {duplicates}"
            )
        return v
