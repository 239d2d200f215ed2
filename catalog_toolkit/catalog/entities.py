"""
Catalog entities.

Authors, books and book details are soft deletable; transactions and their
detail lines are hard types. Every table carries the audit columns.
"""

from datetime import datetime
from typing import List, NamedTuple, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..soft_delete.mixins import AuditMixin, SoftDeleteMixin


class Base(DeclarativeBase):
    """Declarative base for catalog tables."""


class Author(Base, AuditMixin, SoftDeleteMixin):
    """Book author."""

    __tablename__ = "m_author"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"Author(id={self.id!r}, full_name={self.full_name!r})"


class Book(Base, AuditMixin, SoftDeleteMixin):
    """Book with its price; physical data lives in :class:`BookDetail`."""

    __tablename__ = "m_book"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("m_author.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    author: Mapped[Author] = relationship(lazy="joined")
    detail: Mapped[Optional["BookDetail"]] = relationship(
        back_populates="book", cascade="all, delete-orphan", uselist=False
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id!r}, title={self.title!r}, price={self.price!r})"


class BookDetail(Base, AuditMixin, SoftDeleteMixin):
    """Physical book data, sharing the book's primary key."""

    __tablename__ = "m_book_detail"

    book_id: Mapped[int] = mapped_column(ForeignKey("m_book.id"), primary_key=True)
    page: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)

    book: Mapped[Book] = relationship(back_populates="detail")

    def __repr__(self) -> str:
        return (
            f"BookDetail(book_id={self.book_id!r}, page={self.page!r}, "
            f"weight={self.weight!r})"
        )


class Transaction(Base, AuditMixin):
    """Sale to a customer; totals are the sums of its detail lines."""

    __tablename__ = "t_transaction"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    total_qty: Mapped[int] = mapped_column(Integer, nullable=False)

    details: Mapped[List["TransactionDetail"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionDetail.book_id",
    )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, customer_name={self.customer_name!r}, "
            f"total_price={self.total_price!r}, total_qty={self.total_qty!r})"
        )


class TransactionDetailId(NamedTuple):
    """Composite identifier of a transaction detail line."""

    transaction_id: int
    book_id: int


class TransactionDetail(Base, AuditMixin):
    """One book line of a transaction."""

    __tablename__ = "t_transaction_detail"

    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("t_transaction.id"), primary_key=True
    )
    book_id: Mapped[int] = mapped_column(ForeignKey("m_book.id"), primary_key=True)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    transaction: Mapped[Transaction] = relationship(back_populates="details")
    book: Mapped[Book] = relationship()

    @property
    def key(self) -> TransactionDetailId:
        return TransactionDetailId(self.transaction_id, self.book_id)

    def __repr__(self) -> str:
        return (
            f"TransactionDetail(transaction_id={self.transaction_id!r}, "
            f"book_id={self.book_id!r}, qty={self.qty!r}, price={self.price!r})"
        )
