"""
Data models for paged and sorted repository reads.

These models describe what the caller asks for (ordering, page window) and
what a paged read returns.
"""

import math
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class Direction(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class Order(BaseModel):
    """Ordering on a single entity property."""

    model_config = ConfigDict(frozen=True)

    attribute: str = Field(..., description="Mapped attribute name", min_length=1)
    direction: Direction = Field(Direction.ASC, description="Sort direction")

    @classmethod
    def parse(cls, expression: str) -> "Order":
        """Build an order from ``"name"`` (ascending) or ``"-name"`` (descending)."""
        expression = expression.strip()
        if expression.startswith("-"):
            return cls(attribute=expression[1:], direction=Direction.DESC)
        return cls(attribute=expression.lstrip("+"), direction=Direction.ASC)


class Sort(BaseModel):
    """Caller supplied ordering applied on top of the soft delete filter."""

    model_config = ConfigDict(frozen=True)

    orders: List[Order] = Field(default_factory=list, description="Orders, by priority")

    @classmethod
    def by(cls, *expressions: str) -> "Sort":
        """
        Shorthand constructor.

        Example:
            >>> Sort.by("title", "-price")
        """
        return cls(orders=[Order.parse(expression) for expression in expressions])

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    def __bool__(self) -> bool:
        return bool(self.orders)


class PageRequest(BaseModel):
    """Zero based page window with optional ordering."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(0, description="Zero based page index", ge=0)
    size: int = Field(20, description="Maximum rows per page", gt=0)
    sort: Sort = Field(default_factory=Sort, description="Ordering of the rows")

    @classmethod
    def of(cls, page: int, size: int, *sort: str) -> "PageRequest":
        return cls(page=page, size=size, sort=Sort.by(*sort))

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> "PageRequest":
        return self.model_copy(update={"page": self.page + 1})


class Page(BaseModel, Generic[T]):
    """One window of a filtered read, with the total visible row count."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: List[T] = Field(default_factory=list, description="Rows in this page")
    page: int = Field(..., description="Zero based page index", ge=0)
    size: int = Field(..., description="Requested page size", gt=0)
    total_elements: int = Field(..., description="Visible rows overall", ge=0)

    @model_validator(mode="after")
    def validate_content_size(self) -> "Page[T]":
        """Ensure a page never holds more rows than requested."""
        if len(self.content) > self.size:
            raise ValueError(
                f"Page holds {len(self.content)} rows but size is {self.size}"
            )
        return self

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.total_elements else 0

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next


def clamp_page_size(size: Optional[int], default: int, maximum: int) -> int:
    """Resolve a requested page size against configured bounds."""
    if size is None:
        return default
    return max(1, min(size, maximum))

